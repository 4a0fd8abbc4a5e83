"""Quadratic Bezier → mirror profile polynomial z(y) = a·y² + b·y + c.

Bezier points are (depth, height) pairs: x holds the depth z, y the domain
coordinate. Segments are frozen; a profile is a tuple of them.

A quadratic in y pins the mean of its two end slopes to the chord slope, so
a chain converted with each Bezier's own control depth is only C0 wherever
the control point sits off the y-midpoint. ``build_profile`` instead solves
one dz/dy per joint so neighbouring segments share it, and hands each
segment the control depth that realises its start slope.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from funhouse.geometry.bezier import QuadraticBezier, sample_parameters

logger = logging.getLogger(__name__)

MAX_SEGMENTS = 16

# Columns of the packed segment buffer.
SEGMENT_FIELDS = ("a", "b", "c", "y_min", "y_max")


@dataclass(frozen=True)
class ProfileSegment:
    a: float
    b: float
    c: float
    y_min: float
    y_max: float

    def evaluate(self, y: NDArray[np.float64] | float) -> NDArray[np.float64] | float:
        return self.a * y * y + self.b * y + self.c

    def slope(self, y: NDArray[np.float64] | float) -> NDArray[np.float64] | float:
        return 2 * self.a * y + self.b

    @property
    def local_coefficients(self) -> tuple[float, float, float]:
        """(a_t, b_t, c_t) of z(t) = a_t·t² + b_t·t + c_t, t ∈ [0, 1] over the domain."""
        r = self.y_max - self.y_min
        y0 = self.y_min
        return (
            self.a * r * r,
            (2 * self.a * y0 + self.b) * r,
            self.a * y0 * y0 + self.b * y0 + self.c,
        )


def bezier_to_polynomial(
    y_min: float, y_max: float, z0: float, z1: float, z2: float
) -> tuple[float, float, float]:
    """Coefficients (a, b, c) with t = (y − y_min) / (y_max − y_min) substituted.

    z(t) = (z0 − 2z1 + z2)·t² + 2(z1 − z0)·t + z0, expanded in y.
    """
    y_range = y_max - y_min
    if y_range == 0.0:
        return (0.0, 0.0, z0)

    a_t = z0 - 2.0 * z1 + z2
    b_t = 2.0 * (z1 - z0)
    c_t = z0

    r2 = y_range * y_range
    a = a_t / r2
    b = b_t / y_range - 2.0 * a_t * y_min / r2
    c = c_t + a_t * y_min * y_min / r2 - b_t * y_min / y_range
    return (a, b, c)


def _ascending(quad: QuadraticBezier) -> QuadraticBezier:
    return quad.reversed() if quad.start[1] > quad.end[1] else quad


def quadratic_to_segment(quad: QuadraticBezier, start_slope: float | None = None) -> ProfileSegment:
    """Convert one (depth, height) quadratic, oriented so z0 belongs to y_min.

    With ``start_slope`` (dz/dy at y_min) the middle depth is taken from the
    slope instead of the control point: z1 = z0 + (y_max − y_min)/2 · slope.
    """
    quad = _ascending(quad)
    (z0, y_min), (z1, _), (z2, y_max) = quad.start, quad.cp, quad.end
    if start_slope is not None:
        z1 = z0 + 0.5 * (y_max - y_min) * start_slope
    a, b, c = bezier_to_polynomial(y_min, y_max, z0, z1, z2)
    return ProfileSegment(a, b, c, y_min, y_max)


def _end_tangents(quad: QuadraticBezier) -> tuple[float, float]:
    """dz/dy of an ascending quadratic at its ends; NaN if it is not monotonic in y."""
    (z0, y0), (z1, y1), (z2, y2) = quad.start, quad.cp, quad.end
    if not y0 < y1 < y2:
        return math.nan, math.nan
    return (z1 - z0) / (y1 - y0), (z2 - z1) / (y2 - y1)


def joint_slopes(quads: Sequence[QuadraticBezier]) -> list[float]:
    """dz/dy at each of the len(quads) + 1 joints of an ascending chain.

    Segment i spans joints i and i + 1 and must satisfy s_i + s_{i+1} = 2·chord_i,
    which leaves one free offset p: s_k = base_k + (−1)^k·p. p is the
    least-squares fit of the s_k to the curve's own end tangents.
    """
    chords = [(q.end[0] - q.start[0]) / (q.end[1] - q.start[1]) for q in quads]
    base = [0.0]
    for chord in chords:
        base.append(2.0 * chord - base[-1])

    total = 0.0
    count = 0
    for i, quad in enumerate(quads):
        for k, tangent in zip((i, i + 1), _end_tangents(quad)):
            if math.isfinite(tangent):
                total += (tangent - base[k]) if k % 2 == 0 else (base[k] - tangent)
                count += 1
    offset = total / count if count else chords[0]
    return [b + offset if k % 2 == 0 else b - offset for k, b in enumerate(base)]


def flat_profile(half_height: float, depth: float = 0.0) -> tuple[ProfileSegment, ...]:
    return (ProfileSegment(0.0, 0.0, depth, -half_height, half_height),)


def line_segments_to_profile(
    lines: Sequence[tuple[float, float, float, float]],
) -> list[ProfileSegment]:
    """Straight segments from sampled (z1, y1, z2, y2) polyline pieces."""
    segments = []
    for z_a, y_a, z_b, y_b in lines:
        if y_a <= y_b:
            z0, z2, y_min, y_max = z_a, z_b, y_a, y_b
        else:
            z0, z2, y_min, y_max = z_b, z_a, y_b, y_a
        a, b, c = bezier_to_polynomial(y_min, y_max, z0, (z0 + z2) / 2, z2)
        segments.append(ProfileSegment(a, b, c, y_min, y_max))
    return segments


def build_profile(
    quads: Sequence[QuadraticBezier],
    y_lo: float,
    y_hi: float,
    max_segments: int = MAX_SEGMENTS,
) -> tuple[tuple[ProfileSegment, ...], bool]:
    """Quadratic chain → partitioned, capped, C1 profile.

    Returns (segments, truncated). Pieces are sorted along y and zero-extent
    ones dropped. Past ``max_segments`` the tail collapses into one straight
    piece up to the chain's top end. Joint slopes come from ``joint_slopes``;
    the first/last bounds are pinned to [y_lo, y_hi]. An empty chain yields a
    flat profile.
    """
    if not quads:
        return flat_profile((y_hi - y_lo) / 2), False

    chain = [_ascending(q) for q in quads]
    chain = [q for q in chain if q.end[1] > q.start[1]]
    if not chain:
        logger.warning("All profile segments have zero extent; using flat mirror")
        return flat_profile((y_hi - y_lo) / 2), False
    chain.sort(key=lambda q: q.start[1])

    truncated = len(chain) > max_segments
    if truncated:
        logger.warning(
            "Profile has %d segments, truncating to %d with a straight tail",
            len(chain),
            max_segments,
        )
        top = max(chain, key=lambda q: q.end[1]).end
        kept = chain[: max_segments - 1]
        tail = QuadraticBezier.line(kept[-1].end if kept else chain[0].start, top)
        chain = kept + [tail] if tail.end[1] > tail.start[1] else kept

    slopes = joint_slopes(chain)
    segments = [quadratic_to_segment(q, s) for q, s in zip(chain, slopes)]
    return partition(segments, y_lo, y_hi), truncated


def partition(segments: Sequence[ProfileSegment], y_lo: float, y_hi: float) -> tuple[ProfileSegment, ...]:
    """Snap shared bounds bit-identical and pin the outer ones to [y_lo, y_hi]."""
    snapped = []
    prev_max = y_lo
    for i, seg in enumerate(segments):
        y_max = y_hi if i == len(segments) - 1 else seg.y_max
        snapped.append(_rebound(seg, prev_max, y_max))
        prev_max = y_max
    return tuple(snapped)


def _rebound(seg: ProfileSegment, y_min: float, y_max: float) -> ProfileSegment:
    if seg.y_min == y_min and seg.y_max == y_max:
        return seg
    return ProfileSegment(seg.a, seg.b, seg.c, y_min, y_max)


@dataclass(frozen=True)
class Seam:
    y: float
    value_jump: float
    slope_jump: float


def seam_report(segments: Sequence[ProfileSegment]) -> list[Seam]:
    """C0/C1 jumps at each joint between consecutive segments."""
    seams = []
    for left, right in zip(segments, segments[1:]):
        y = right.y_min
        seams.append(
            Seam(
                y=y,
                value_jump=float(abs(left.evaluate(y) - right.evaluate(y))),
                slope_jump=float(abs(left.slope(y) - right.slope(y))),
            )
        )
    return seams


def evaluate_profile(segments: Sequence[ProfileSegment], y: NDArray[np.float64]) -> NDArray[np.float64]:
    """Profile depth at each y (NaN outside the profile range)."""
    y = np.asarray(y, dtype=np.float64)
    z = np.full(y.shape, np.nan)
    for seg in segments:
        mask = (y >= seg.y_min) & (y <= seg.y_max) & np.isnan(z)
        z[mask] = seg.evaluate(y[mask])
    return z


def profile_deviation(
    segments: Sequence[ProfileSegment], quads: Sequence[QuadraticBezier], samples: int = 20
) -> float:
    """Largest depth gap between a profile and the quadratic chain it was built from."""
    t = sample_parameters(samples)
    worst = 0.0
    for quad in quads:
        pts = quad.evaluate(t)
        gap = np.abs(evaluate_profile(segments, pts[:, 1]) - pts[:, 0])
        gap = gap[~np.isnan(gap)]
        if gap.size:
            worst = max(worst, float(gap.max()))
    return worst


def pack_segments(segments: Sequence[ProfileSegment], capacity: int = MAX_SEGMENTS) -> NDArray[np.float64]:
    """Fixed-capacity (capacity, 5) buffer of (a, b, c, y_min, y_max) rows.

    Unused rows get an empty domain (y_min = +inf, y_max = −inf) so they
    never accept a hit.
    """
    packed = np.zeros((capacity, len(SEGMENT_FIELDS)), dtype=np.float64)
    packed[:, 3] = np.inf
    packed[:, 4] = -np.inf
    if len(segments) > capacity:
        logger.warning("Packing %d segments into %d slots, dropping the rest", len(segments), capacity)
    for i, seg in enumerate(segments[:capacity]):
        packed[i] = (seg.a, seg.b, seg.c, seg.y_min, seg.y_max)
    return packed


@dataclass(frozen=True)
class RevolutionProfile:
    """Rotationally symmetric profile z(r) = a2·r⁴ + a1·r² + a0."""

    a2: float = 0.0
    a1: float = -0.3
    a0: float = 0.0

    def evaluate(self, r: NDArray[np.float64] | float) -> NDArray[np.float64] | float:
        r2 = r * r
        return self.a2 * r2 * r2 + self.a1 * r2 + self.a0

    def slope_factor(self, r2: NDArray[np.float64] | float) -> NDArray[np.float64] | float:
        """dz/dr divided by r, so ∂z/∂x = factor·x and ∂z/∂y = factor·y."""
        return 4.0 * self.a2 * r2 + 2.0 * self.a1
