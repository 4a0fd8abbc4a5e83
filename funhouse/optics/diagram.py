"""Cross-section of a revolution mirror in the x = 0 plane, with a fan of traced rays."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from funhouse.engine.config import SceneConfig
from funhouse.geometry.polynomial import RevolutionProfile
from funhouse.optics.intersection import intersect_revolution
from funhouse.optics.shading import normals_revolution, reflect

Point2 = tuple[float, float]


@dataclass(frozen=True)
class TracedRay:
    """One ray of the fan, as (z, r) points in the diagram plane."""

    angle: float
    hit: Point2 | None = None
    landing: Point2 | None = None
    # Reflection travels away from the image plane
    behind: bool = False

    @property
    def missed(self) -> bool:
        return self.hit is None


@dataclass(frozen=True)
class CrossSection:
    profile: list[Point2] = field(default_factory=list)
    rays: list[TracedRay] = field(default_factory=list)
    mirror_dist: float = 0.0
    image_plane: float = 0.0
    image_half_height: float = 0.0


def cross_section(
    profile: RevolutionProfile,
    scene: SceneConfig | None = None,
    samples: int = 100,
    rays: int = 7,
) -> CrossSection:
    scene = scene or SceneConfig()
    r = np.linspace(-scene.mirror_radius, scene.mirror_radius, max(samples, 2))
    z = profile.evaluate(r) + scene.mirror_dist
    outline = [(float(zi), float(ri)) for zi, ri in zip(z, r)]

    half = scene.fov / 2.0
    angles = np.linspace(-half, half, rays) if rays > 1 else np.zeros(max(rays, 0))
    directions = np.stack([np.zeros_like(angles), np.sin(angles), np.cos(angles)], axis=-1)

    traced: list[TracedRay] = []
    if len(angles):
        hits = intersect_revolution(
            np.zeros(3), directions, profile, scene.mirror_dist, scene.mirror_radius, scene.t_epsilon
        )
        for i, angle in enumerate(angles):
            h = hits.at(i)
            if h is None:
                traced.append(TracedRay(angle=float(angle)))
                continue
            pos = np.asarray([h.position])
            refl = reflect(directions[i : i + 1], normals_revolution(pos, profile))[0]
            hit_point = (h.position[2], h.position[1])
            if refl[2] >= 0.0:
                traced.append(TracedRay(angle=float(angle), hit=hit_point, behind=True))
                continue
            s = (-scene.image_plane_dist - h.position[2]) / refl[2]
            landing = (-scene.image_plane_dist, float(h.position[1] + s * refl[1]))
            traced.append(TracedRay(angle=float(angle), hit=hit_point, landing=landing))

    return CrossSection(
        profile=outline,
        rays=traced,
        mirror_dist=scene.mirror_dist,
        image_plane=-scene.image_plane_dist,
        image_half_height=scene.image_size_y / 2.0,
    )
