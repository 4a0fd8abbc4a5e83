"""Analytical ray–mirror intersection for the two profile families.

Extruded: z = a·y² + b·y + c + mirror_dist per segment, flat along x. Each
segment gives a quadratic in t.

Revolution: z = a2·r⁴ + a1·r² + a0 + mirror_dist with r² = x² + y². The ray
gives a quartic in t, solved by Ferrari, or a quadratic when a2 ≈ 0.

All functions take (N, 3) origin/direction arrays (an origin of shape (3,)
broadcasts) and return a HitBuffer whose t is NO_HIT for misses.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from funhouse.engine.config import ProfileFamily
from funhouse.engine.context import RenderContext
from funhouse.geometry.polynomial import RevolutionProfile
from funhouse.optics.solvers import (
    LEADING_EPS,
    NO_HIT,
    polish_roots,
    solve_quadratic,
    solve_quartic,
)

Vec3 = tuple[float, float, float]

# a2 below this → paraboloid fast path.
QUARTIC_EPS = 1e-9
# Quartic/cubic terms contributing less than this fraction of the constant
# term at the linear-estimate distance are dropped.
NEGLIGIBLE_HIGH_ORDER = 1e-10


@dataclass(frozen=True)
class Ray:
    origin: Vec3 = (0.0, 0.0, 0.0)
    direction: Vec3 = (0.0, 0.0, 1.0)

    @classmethod
    def towards(cls, direction: Vec3, origin: Vec3 = (0.0, 0.0, 0.0)) -> Ray:
        d = np.asarray(direction, dtype=np.float64)
        d = d / np.linalg.norm(d)
        return cls(origin=origin, direction=(float(d[0]), float(d[1]), float(d[2])))


@dataclass(frozen=True)
class Hit:
    t: float
    position: Vec3
    segment_index: int


@dataclass
class HitBuffer:
    t: NDArray[np.float64]
    position: NDArray[np.float64]
    segment_index: NDArray[np.int64]

    @property
    def mask(self) -> NDArray[np.bool_]:
        return self.t > 0.0

    def __len__(self) -> int:
        return len(self.t)

    def at(self, i: int) -> Hit | None:
        if self.t[i] <= 0.0:
            return None
        p = self.position[i]
        return Hit(
            t=float(self.t[i]),
            position=(float(p[0]), float(p[1]), float(p[2])),
            segment_index=int(self.segment_index[i]),
        )


def _prepare(origins, directions) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    d = np.atleast_2d(np.asarray(directions, dtype=np.float64))
    o = np.broadcast_to(np.asarray(origins, dtype=np.float64), d.shape)
    return o, d


def _finish(o, d, best_t, best_idx) -> HitBuffer:
    hit = np.isfinite(best_t)
    t = np.where(hit, best_t, NO_HIT)
    position = np.where(hit[:, None], o + np.where(hit, best_t, 0.0)[:, None] * d, 0.0)
    return HitBuffer(t=t, position=position, segment_index=np.where(hit, best_idx, -1))


def intersect_extruded(
    origins,
    directions,
    packed_segments: NDArray[np.float64],
    mirror_dist: float,
    half_width: float,
    t_epsilon: float = 1e-3,
) -> HitBuffer:
    """Nearest hit over all segments of an extruded profile.

    Per segment, the lower root is tried first and the other root is used
    when the lower one misses the segment's y domain.
    """
    o, d = _prepare(origins, directions)
    ox, oy, oz = o[:, 0], o[:, 1], o[:, 2]
    dx, dy, dz = d[:, 0], d[:, 1], d[:, 2]

    best_t = np.full(len(d), np.inf)
    best_idx = np.full(len(d), -1, dtype=np.int64)

    with np.errstate(invalid="ignore", over="ignore"):
        for k, (a, b, c, y_min, y_max) in enumerate(packed_segments):
            if not y_min <= y_max:
                continue
            qa = a * dy * dy
            qb = 2.0 * a * oy * dy + b * dy - dz
            qc = a * oy * oy + b * oy + c + mirror_dist - oz
            low, high = solve_quadratic(qa, qb, qc)

            for root in (low, high):
                y = oy + root * dy
                x = ox + root * dx
                valid = (
                    np.isfinite(root)
                    & (root > t_epsilon)
                    & (y >= y_min)
                    & (y <= y_max)
                    & (np.abs(x) <= half_width)
                    & (root < best_t)
                )
                best_t = np.where(valid, root, best_t)
                best_idx = np.where(valid, k, best_idx)

    return _finish(o, d, best_t, best_idx)


def revolution_coefficients(
    o: NDArray[np.float64], d: NDArray[np.float64], profile: RevolutionProfile, mirror_dist: float
) -> tuple[NDArray[np.float64], ...]:
    """(c4, c3, c2, c1, c0) of the quartic in t."""
    ox, oy, oz = o[:, 0], o[:, 1], o[:, 2]
    dx, dy, dz = d[:, 0], d[:, 1], d[:, 2]
    # r²(t) = A·t² + B·t + C
    A = dx * dx + dy * dy
    B = 2.0 * (ox * dx + oy * dy)
    C = ox * ox + oy * oy
    a2, a1, a0 = profile.a2, profile.a1, profile.a0
    return (
        a2 * A * A,
        2.0 * a2 * A * B,
        a2 * (B * B + 2.0 * A * C) + a1 * A,
        2.0 * a2 * B * C + a1 * B - dz,
        a2 * C * C + a1 * C + a0 + mirror_dist - oz,
    )


def intersect_revolution(
    origins,
    directions,
    profile: RevolutionProfile,
    mirror_dist: float,
    radius: float,
    t_epsilon: float = 1e-3,
) -> HitBuffer:
    """Nearest hit on a surface of revolution within ``radius`` of the axis."""
    o, d = _prepare(origins, directions)
    c4, c3, c2, c1, c0 = revolution_coefficients(o, d, profile, mirror_dist)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        quad_low, quad_high = solve_quadratic(c2, c1, c0)
        candidates = np.stack([quad_low, quad_high], axis=-1)

        if abs(profile.a2) >= QUARTIC_EPS:
            # Rays near the axis make the quartic terms vanish; there the
            # quadratic remainder is the better-conditioned equation.
            t_est = np.where(np.abs(c1) > LEADING_EPS, np.abs(c0 / c1), 1.0)
            high_order = np.abs(c4) * t_est**4 + np.abs(c3) * t_est**3
            quartic = (np.abs(c4) > LEADING_EPS) & (
                high_order > NEGLIGIBLE_HIGH_ORDER * np.maximum(np.abs(c0), LEADING_EPS)
            )
            safe_c4 = np.where(quartic, c4, 1.0)
            roots = solve_quartic(safe_c4, c3, c2, c1, c0)
            roots = polish_roots(roots, (safe_c4, c3, c2, c1, c0))
            padded = np.concatenate([candidates, np.full_like(candidates, np.nan)], axis=-1)
            candidates = np.where(quartic[:, None], roots, padded)

        best_t = np.full(len(d), np.inf)
        for j in range(candidates.shape[-1]):
            root = candidates[:, j]
            hx = o[:, 0] + root * d[:, 0]
            hy = o[:, 1] + root * d[:, 1]
            valid = (
                np.isfinite(root)
                & (root > t_epsilon)
                & (hx * hx + hy * hy <= radius * radius)
                & (root < best_t)
            )
            best_t = np.where(valid, root, best_t)

    return _finish(o, d, best_t, np.zeros(len(d), dtype=np.int64))


def intersect(ctx: RenderContext, origins, directions) -> HitBuffer:
    """Dispatch on the context's profile family."""
    scene = ctx.scene
    if ctx.family is ProfileFamily.REVOLUTION:
        return intersect_revolution(
            origins,
            directions,
            ctx.revolution,
            scene.mirror_dist,
            scene.mirror_radius,
            scene.t_epsilon,
        )
    return intersect_extruded(
        origins,
        directions,
        ctx.packed_segments,
        scene.mirror_dist,
        scene.mirror_half_width,
        scene.t_epsilon,
    )


def intersect_ray(ctx: RenderContext, ray: Ray) -> Hit | None:
    """Single-ray convenience over ``intersect``."""
    return intersect(ctx, ray.origin, [ray.direction]).at(0)
