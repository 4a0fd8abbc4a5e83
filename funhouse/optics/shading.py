"""Shading — analytical normals, reflection, image-plane projection and falloff.

Colours are float RGBA in [0, 1], shape (N, 4).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from funhouse.engine.config import Backdrop, ProfileFamily, SceneConfig
from funhouse.engine.context import RenderContext
from funhouse.geometry.polynomial import RevolutionProfile
from funhouse.optics.intersection import HitBuffer


def _normalize(v: NDArray[np.float64]) -> NDArray[np.float64]:
    n = np.linalg.norm(v, axis=-1, keepdims=True)
    return v / np.where(n > 0.0, n, 1.0)


def face_camera(normals: NDArray[np.float64]) -> NDArray[np.float64]:
    """Flip normals so N.z < 0 (the camera sits on the −z side of the mirror)."""
    return np.where(normals[:, 2:3] > 0.0, -normals, normals)


def normals_extruded(
    position: NDArray[np.float64],
    segment_index: NDArray[np.int64],
    packed: NDArray[np.float64],
) -> NDArray[np.float64]:
    """∇(z − profile(y)) = (0, −(2a·y + b), 1), normalised and camera-facing."""
    idx = np.clip(segment_index, 0, len(packed) - 1)
    a = packed[idx, 0]
    b = packed[idx, 1]
    slope = 2.0 * a * position[:, 1] + b
    raw = np.stack([np.zeros_like(slope), -slope, np.ones_like(slope)], axis=-1)
    return face_camera(_normalize(raw))


def normals_revolution(position: NDArray[np.float64], profile: RevolutionProfile) -> NDArray[np.float64]:
    """∇(z − profile(r)) = (−k·x, −k·y, 1) with k = 4·a2·r² + 2·a1."""
    x, y = position[:, 0], position[:, 1]
    k = profile.slope_factor(x * x + y * y)
    raw = np.stack([-k * x, -k * y, np.ones_like(x)], axis=-1)
    return face_camera(_normalize(raw))


def reflect(directions: NDArray[np.float64], normals: NDArray[np.float64]) -> NDArray[np.float64]:
    """R = D − 2(D·N)N."""
    dot = np.sum(directions * normals, axis=-1, keepdims=True)
    return directions - 2.0 * dot * normals


@dataclass
class Projection:
    uv: NDArray[np.float64]
    reflected: NDArray[np.float64]
    # Reflected ray heads back toward the camera side (R.z < 0)
    toward_plane: NDArray[np.bool_]

    @property
    def in_frame(self) -> NDArray[np.bool_]:
        u, v = self.uv[:, 0], self.uv[:, 1]
        return self.toward_plane & (u >= 0.0) & (u <= 1.0) & (v >= 0.0) & (v <= 1.0)


def project_to_image_plane(
    position: NDArray[np.float64],
    normals: NDArray[np.float64],
    directions: NDArray[np.float64],
    scene: SceneConfig,
) -> Projection:
    """Reflect at the hit and land on the plane z = −image_plane_dist.

    u = 0.5 − X/size_x mirrors the frame horizontally; v = 0.5 − Y/size_y
    maps camera-up to the top row of the source frame.
    """
    reflected = reflect(directions, normals)
    rz = reflected[:, 2]
    toward = rz < 0.0
    with np.errstate(divide="ignore", invalid="ignore"):
        s = np.where(toward, (-scene.image_plane_dist - position[:, 2]) / np.where(toward, rz, -1.0), 0.0)
    px = position[:, 0] + s * reflected[:, 0]
    py = position[:, 1] + s * reflected[:, 1]
    uv = np.stack([0.5 - px / scene.image_size_x, 0.5 - py / scene.image_size_y], axis=-1)
    return Projection(uv=uv, reflected=reflected, toward_plane=toward)


def smoothstep(edge0: float, edge1: float, x: NDArray[np.float64]) -> NDArray[np.float64]:
    if edge1 <= edge0:
        return (x >= edge1).astype(np.float64)
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def edge_fade(position: NDArray[np.float64], ctx: RenderContext) -> NDArray[np.float64]:
    """1 inside, falling smoothly to 0 at the mirror's rim."""
    scene = ctx.scene
    if ctx.family is ProfileFamily.REVOLUTION:
        rho = np.hypot(position[:, 0], position[:, 1]) / scene.mirror_radius
    else:
        rho = np.maximum(
            np.abs(position[:, 0]) / scene.mirror_half_width,
            np.abs(position[:, 1]) / scene.mirror_half_height,
        )
    return 1.0 - smoothstep(scene.edge_fade_start, 1.0, rho)


def fresnel_brightness(
    directions: NDArray[np.float64], normals: NDArray[np.float64], scene: SceneConfig
) -> NDArray[np.float64]:
    """Schlick-style term: brighter toward grazing incidence."""
    cos_theta = np.clip(np.abs(np.sum(directions * normals, axis=-1)), 0.0, 1.0)
    return scene.reflectivity * (1.0 + scene.fresnel_strength * (1.0 - cos_theta) ** 5)


def backdrop_colors(reflected: NDArray[np.float64], scene: SceneConfig) -> NDArray[np.float64]:
    """Colour for reflected rays that land outside the source frame."""
    n = len(reflected)
    if scene.backdrop is Backdrop.GRADIENT:
        ry = _normalize(reflected)[:, 1]
        w = np.clip(0.5 + 0.5 * ry, 0.0, 1.0)[:, None]
        low = np.asarray(scene.backdrop_low)
        high = np.asarray(scene.backdrop_high)
        return low + (high - low) * w
    return np.broadcast_to(np.asarray(scene.background, dtype=np.float64), (n, 4)).copy()


def shade(
    hits: HitBuffer,
    directions: NDArray[np.float64],
    ctx: RenderContext,
    sampler,
) -> NDArray[np.float64]:
    """Final colour per ray.

    Misses → background; reflection away from the image plane → the
    behind-mirror colour; outside the frame → backdrop; otherwise the
    sampled texel with brightness and edge fade applied.
    """
    scene = ctx.scene
    directions = np.atleast_2d(directions)
    n = len(directions)
    background = np.asarray(scene.background, dtype=np.float64)
    colors = np.broadcast_to(background, (n, 4)).copy()

    hit = hits.mask
    if not np.any(hit):
        return colors

    pos = hits.position[hit]
    dirs = directions[hit]
    if ctx.family is ProfileFamily.REVOLUTION:
        normals = normals_revolution(pos, ctx.revolution)
    else:
        normals = normals_extruded(pos, hits.segment_index[hit], ctx.packed_segments)

    proj = project_to_image_plane(pos, normals, dirs, scene)
    out = np.empty((len(pos), 4))
    out[:] = scene.behind_mirror

    outside = proj.toward_plane & ~proj.in_frame
    if np.any(outside):
        out[outside] = backdrop_colors(proj.reflected[outside], scene)

    inside = proj.in_frame
    if np.any(inside):
        texel = sampler(proj.uv[inside])
        lit = texel.copy()
        brightness = fresnel_brightness(dirs[inside], normals[inside], scene)[:, None]
        lit[:, :3] = np.clip(lit[:, :3] * brightness, 0.0, 1.0)
        fade = edge_fade(pos[inside], ctx)[:, None]
        out[inside] = background + (lit - background) * fade

    colors[hit] = out
    return colors
