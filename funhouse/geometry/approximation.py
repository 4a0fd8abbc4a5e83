"""Cubic → quadratic Bezier approximation by adaptive midpoint subdivision."""

from __future__ import annotations

import logging

from funhouse.geometry.bezier import CubicBezier, QuadraticBezier, max_deviation

logger = logging.getLogger(__name__)

# 20 intervals = 21 samples per curve; enough to catch the single bulge
# a cubic/quadratic mismatch can have between shared endpoints.
ERROR_SAMPLES = 20

# Each split halves the parametric extent; 2**10 pieces is far beyond what
# a designer curve needs at any sane tolerance.
MAX_DEPTH = 10


def best_fit_quadratic(cubic: CubicBezier) -> QuadraticBezier:
    """Single quadratic sharing the cubic's endpoints.

    cp = (3·cp1 + 3·cp2 − start − end) / 4
    """
    cp = (
        (3 * cubic.cp1[0] + 3 * cubic.cp2[0] - cubic.start[0] - cubic.end[0]) / 4,
        (3 * cubic.cp1[1] + 3 * cubic.cp2[1] - cubic.start[1] - cubic.end[1]) / 4,
    )
    return QuadraticBezier(cubic.start, cp, cubic.end)


def approximation_pieces(
    cubic: CubicBezier,
    tolerance: float = 1.0,
    samples: int = ERROR_SAMPLES,
    max_depth: int = MAX_DEPTH,
) -> list[tuple[CubicBezier, QuadraticBezier]]:
    """Adaptive split of ``cubic``; each sub-cubic paired with its quadratic.

    Output preserves curve parameter order (left half before right half),
    and consecutive quadratics are contiguous.
    """
    result: list[tuple[CubicBezier, QuadraticBezier]] = []
    # Explicit stack: push right then left so left pops first.
    stack: list[tuple[CubicBezier, int]] = [(cubic, 0)]

    while stack:
        current, depth = stack.pop()
        quad = best_fit_quadratic(current)
        error = max_deviation(current, quad, samples)

        if error <= tolerance:
            result.append((current, quad))
        elif depth >= max_depth:
            logger.debug("Depth ceiling hit (error %.4g > %.4g); accepting", error, tolerance)
            result.append((current, quad))
        else:
            left, right = current.subdivide(0.5)
            stack.append((right, depth + 1))
            stack.append((left, depth + 1))

    return result


def cubic_to_quadratics(
    cubic: CubicBezier,
    tolerance: float = 1.0,
    samples: int = ERROR_SAMPLES,
    max_depth: int = MAX_DEPTH,
) -> list[QuadraticBezier]:
    """Approximate a cubic with quadratics within ``tolerance``."""
    return [quad for _, quad in approximation_pieces(cubic, tolerance, samples, max_depth)]
