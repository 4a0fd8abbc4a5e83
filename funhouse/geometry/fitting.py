"""Curve fitting — anchors between two fixed boundary points → quadratic chain.

Four constructions, all pure functions of their input:

- straight line (no anchors)
- single arc through one anchor at t=0.5
- Catmull-Rom spline → cubic Beziers → adaptive quadratics
- S-curve pairs mirrored across each anchor (C1 at the anchors)

Which one runs for a given anchor count is chosen by the strategy registry
in ``funhouse.engine.strategies``.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from funhouse.geometry.approximation import cubic_to_quadratics
from funhouse.geometry.bezier import CubicBezier, Point, QuadraticBezier, midpoint


def catmull_rom_to_cubic(p0: Point, p1: Point, p2: Point, p3: Point) -> CubicBezier:
    """Uniform Catmull-Rom span p1→p2 as an equivalent cubic Bezier."""
    return CubicBezier(
        start=(p1[0], p1[1]),
        cp1=(p1[0] + (p2[0] - p0[0]) / 6, p1[1] + (p2[1] - p0[1]) / 6),
        cp2=(p2[0] - (p3[0] - p1[0]) / 6, p2[1] - (p3[1] - p1[1]) / 6),
        end=(p2[0], p2[1]),
    )


def spline_cubics(points: Sequence[Point]) -> list[CubicBezier]:
    """One cubic per span, duplicating the boundary points at the ends."""
    n = len(points)
    if n < 2:
        return []
    cubics = []
    for i in range(n - 1):
        p0 = points[max(0, i - 1)]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[min(n - 1, i + 2)]
        cubics.append(catmull_rom_to_cubic(p0, p1, p2, p3))
    return cubics


def spline_to_quadratics(points: Sequence[Point], tolerance: float = 1.0) -> list[QuadraticBezier]:
    """Catmull-Rom through ``points`` approximated by quadratics within tolerance."""
    quads: list[QuadraticBezier] = []
    for cubic in spline_cubics(points):
        quads.extend(cubic_to_quadratics(cubic, tolerance))
    return quads


def evaluate_spline(points: Sequence[Point], t: float) -> Point:
    """Point on the uniform Catmull-Rom curve at global parameter t ∈ [0, 1]."""
    n = len(points) - 1
    if n < 1:
        return points[0]
    scaled = t * n
    i = int(np.floor(scaled))
    if i >= n:
        return points[n]
    lt = scaled - i

    p0 = points[max(0, i - 1)]
    p1 = points[i]
    p2 = points[min(n, i + 1)]
    p3 = points[min(n, i + 2)]

    t2 = lt * lt
    t3 = t2 * lt

    def kernel(k: int) -> float:
        return 0.5 * (
            2 * p1[k]
            + (-p0[k] + p2[k]) * lt
            + (2 * p0[k] - 5 * p1[k] + 4 * p2[k] - p3[k]) * t2
            + (-p0[k] + 3 * p1[k] - 3 * p2[k] + p3[k]) * t3
        )

    return (kernel(0), kernel(1))


def sample_spline(points: Sequence[Point], count: int = 30) -> NDArray[np.float64]:
    """(count + 1)x2 polyline along the spline."""
    return np.array([evaluate_spline(points, i / count) for i in range(count + 1)])


def straight_profile(start: Point, end: Point) -> list[QuadraticBezier]:
    return [QuadraticBezier.line(start, end)]


def single_arc(start: Point, anchor: Point, end: Point) -> list[QuadraticBezier]:
    return [QuadraticBezier.through(start, anchor, end)]


def s_curves(start: Point, anchors: Sequence[Point], end: Point) -> list[QuadraticBezier]:
    """Two arcs per anchor, junctions at the midpoints between neighbours.

    Anchor i spans J_i → anchor → J_{i+1}, where J_0 = start, J_n = end and
    the inner junctions are anchor midpoints. The control points sit on the
    line through the anchor parallel to J_{i+1} − J_i and are mirrored
    across it (cp_after = 2·anchor − cp_before), so the tangent is
    continuous at every anchor. Their offset along the fitting axis is half
    the shorter side, which keeps each arc monotonic in y.
    """
    n = len(anchors)
    junctions = [start] + [midpoint(anchors[i - 1], anchors[i]) for i in range(1, n)] + [end]

    quads: list[QuadraticBezier] = []
    for i, anchor in enumerate(anchors):
        before, after = junctions[i], junctions[i + 1]
        tx = after[0] - before[0]
        ty = after[1] - before[1]
        reach = min(anchor[1] - before[1], after[1] - anchor[1])
        k = 0.5 * reach / ty if abs(ty) > 1e-12 else 0.0
        k = max(k, 0.0)

        cp_before = (anchor[0] - k * tx, anchor[1] - k * ty)
        cp_after = (2 * anchor[0] - cp_before[0], 2 * anchor[1] - cp_before[1])

        quads.append(QuadraticBezier(before, cp_before, anchor))
        quads.append(QuadraticBezier(anchor, cp_after, after))
    return quads
