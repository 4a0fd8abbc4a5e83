"""Closed-form polynomial root solvers, vectorised over numpy arrays.

Missing roots are NaN. Callers reduce candidate roots to a single ray
parameter with ``smallest_positive``, whose NO_HIT sentinel (−1) is the
"no intersection" signal shared by every layer above.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

NO_HIT = -1.0

# Leading coefficients below this are treated as zero (degree drop).
LEADING_EPS = 1e-12
# Depressed-quartic linear term below this → biquadratic branch.
BIQUADRATIC_EPS = 1e-12


def solve_quadratic(
    a: ArrayLike, b: ArrayLike, c: ArrayLike, eps: float = LEADING_EPS
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Roots of a·t² + b·t + c = 0 as (low, high).

    Leading coefficient ~0 → linear root in both slots. Negative
    discriminant or a vanishing equation → NaN.
    """
    a, b, c = np.broadcast_arrays(
        np.asarray(a, dtype=np.float64),
        np.asarray(b, dtype=np.float64),
        np.asarray(c, dtype=np.float64),
    )
    with np.errstate(divide="ignore", invalid="ignore"):
        linear = np.abs(a) < eps
        lin_root = np.where(np.abs(b) > eps, -c / b, np.nan)

        disc = b * b - 4.0 * a * c
        sq = np.sqrt(np.where(disc >= 0.0, disc, np.nan))
        sign_b = np.where(b >= 0.0, 1.0, -1.0)
        q = -0.5 * (b + sign_b * sq)
        r1 = q / a
        r2 = np.where(q != 0.0, c / q, r1)

        low = np.where(linear, lin_root, np.fmin(r1, r2))
        high = np.where(linear, lin_root, np.fmax(r1, r2))
    return low, high


def largest_cubic_root(a: ArrayLike, b: ArrayLike, c: ArrayLike) -> NDArray[np.float64]:
    """Largest real root of m³ + a·m² + b·m + c = 0 (Cardano).

    One real root → Cardano's radicals; three real roots → the k=0 branch
    of the trigonometric form, which is the largest.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    c = np.asarray(c, dtype=np.float64)

    p = b - a * a / 3.0
    q = 2.0 * a**3 / 27.0 - a * b / 3.0 + c
    shift = -a / 3.0
    disc = (q / 2.0) ** 2 + (p / 3.0) ** 3

    with np.errstate(divide="ignore", invalid="ignore"):
        sq = np.sqrt(np.maximum(disc, 0.0))
        one_real = np.cbrt(-q / 2.0 + sq) + np.cbrt(-q / 2.0 - sq)

        rho = np.sqrt(np.maximum(-p / 3.0, 0.0))
        rho3 = rho**3
        arg = np.where(rho3 > 0.0, -q / 2.0 / rho3, 0.0)
        three_real = 2.0 * rho * np.cos(np.arccos(np.clip(arg, -1.0, 1.0)) / 3.0)

    return np.where(disc > 0.0, one_real, three_real) + shift


def solve_quartic(
    c4: ArrayLike, c3: ArrayLike, c2: ArrayLike, c1: ArrayLike, c0: ArrayLike
) -> NDArray[np.float64]:
    """Real roots of c4·t⁴ + c3·t³ + c2·t² + c1·t + c0 = 0 by Ferrari's method.

    Returns an (..., 4) array, NaN where a root is complex or a stage
    degenerates. c4 must be non-zero; callers route ~0 leading terms to
    ``solve_quadratic``.

    t = u − b/4 gives the depressed quartic u⁴ + p·u² + q·u + r = 0. For
    q ≈ 0 it is a quadratic in u². Otherwise a root m of the resolvent
    8m³ − 4p·m² − 8r·m + (4pr − q²) = 0 with s² = 2m − p > 0 factors it into
        u² − s·u + (m + q/2s) = 0   and   u² + s·u + (m − q/2s) = 0.
    """
    c4, c3, c2, c1, c0 = np.broadcast_arrays(
        *(np.asarray(v, dtype=np.float64) for v in (c4, c3, c2, c1, c0))
    )
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        b = c3 / c4
        c = c2 / c4
        d = c1 / c4
        e = c0 / c4

        b2 = b * b
        p = c - 3.0 * b2 / 8.0
        q = d - b * c / 2.0 + b2 * b / 8.0
        r = e - b * d / 4.0 + b2 * c / 16.0 - 3.0 * b2 * b2 / 256.0
        shift = -b / 4.0

        # Biquadratic: u² = w
        w_low, w_high = solve_quadratic(np.ones_like(p), p, r)
        bi = np.stack(
            [_sqrt_or_nan(w_high), -_sqrt_or_nan(w_high), _sqrt_or_nan(w_low), -_sqrt_or_nan(w_low)],
            axis=-1,
        )

        # Resolvent cubic, monic: m³ − (p/2)·m² − r·m + (p·r/2 − q²/8) = 0
        m = largest_cubic_root(-p / 2.0, -r, p * r / 2.0 - q * q / 8.0)
        s2 = 2.0 * m - p
        s = _sqrt_or_nan(np.where(s2 > 0.0, s2, np.nan))
        k = q / (2.0 * s)

        f1_low, f1_high = solve_quadratic(np.ones_like(s), -s, m + k)
        f2_low, f2_high = solve_quadratic(np.ones_like(s), s, m - k)
        ferrari = np.stack([f1_low, f1_high, f2_low, f2_high], axis=-1)

        use_bi = (np.abs(q) < BIQUADRATIC_EPS)[..., None]
        roots = np.where(use_bi, bi, ferrari) + shift[..., None]

    return roots


def polish_roots(
    roots: NDArray[np.float64], coeffs: tuple[ArrayLike, ...], steps: int = 2
) -> NDArray[np.float64]:
    """Fixed number of Newton corrections against the original polynomial.

    ``coeffs`` is highest degree first; ``roots`` has a trailing candidate
    axis. NaN roots stay NaN; a vanishing derivative leaves a root as is.
    """
    coeffs = [np.asarray(k, dtype=np.float64)[..., None] for k in coeffs]
    degree = len(coeffs) - 1
    t = roots
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for _ in range(steps):
            f = np.zeros_like(t)
            df = np.zeros_like(t)
            for i, k in enumerate(coeffs):
                power = degree - i
                f = f * t + k
                if power > 0:
                    df = df * t + power * k
            step = np.where(np.abs(df) > 0.0, f / df, 0.0)
            t = np.where(np.isfinite(step), t - step, t)
    return t


def smallest_positive(roots: NDArray[np.float64], t_min: float = 1e-3) -> NDArray[np.float64]:
    """Smallest root > t_min along the last axis, NO_HIT where none."""
    candidates = np.where(np.isfinite(roots) & (roots > t_min), roots, np.inf)
    best = np.min(candidates, axis=-1)
    return np.where(np.isfinite(best), best, NO_HIT)


def _sqrt_or_nan(x: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.sqrt(np.where(x >= 0.0, x, np.nan))
