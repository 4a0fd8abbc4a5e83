"""Engine configuration — scene optics and curve designer knobs."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass


class ProfileFamily(str, enum.Enum):
    EXTRUDED = "extruded"
    REVOLUTION = "revolution"


class FitStrategy(str, enum.Enum):
    POINT_PASSTHROUGH = "point_passthrough"
    SPRING_SPLINE = "spring_spline"
    HYBRID = "hybrid"


class Backdrop(str, enum.Enum):
    SOLID = "solid"
    GRADIENT = "gradient"


RGBA = tuple[float, float, float, float]


@dataclass(frozen=True)
class SceneConfig:
    """Camera-space scene. Camera at the origin looking down +Z."""

    family: ProfileFamily = ProfileFamily.EXTRUDED

    # Mirror placement and extent
    mirror_dist: float = 2.0
    mirror_half_width: float = 1.5
    mirror_half_height: float = 2.0
    mirror_radius: float = 1.5  # revolution family only

    # Image plane behind the camera at z = -image_plane_dist
    image_plane_dist: float = 0.5
    image_size_x: float = 1.6
    image_size_y: float = 1.2

    fov: float = math.pi / 3.0  # radians, vertical

    # Rays below this t are self-intersections at the origin
    t_epsilon: float = 1e-3

    # Edge fade: 1 - smoothstep(edge_fade_start, 1, normalized radius)
    edge_fade_start: float = 0.9
    # Brightness = reflectivity * (1 + fresnel_strength * (1 - cos)^5)
    reflectivity: float = 0.95
    fresnel_strength: float = 0.25

    background: RGBA = (1.0, 1.0, 1.0, 1.0)
    behind_mirror: RGBA = (0.05, 0.05, 0.05, 1.0)
    backdrop: Backdrop = Backdrop.SOLID
    # Gradient backdrop: colour at the bottom / top of the reflected hemisphere
    backdrop_low: RGBA = (0.55, 0.6, 0.7, 1.0)
    backdrop_high: RGBA = (0.9, 0.93, 1.0, 1.0)

    # Tiled dispatch
    tile_rows: int = 64
    workers: int = 4


@dataclass(frozen=True)
class DesignerConfig:
    """Curve designer — canvas constraints and physical scaling."""

    strategy: FitStrategy = FitStrategy.HYBRID
    # Max deviation for cubic → quadratic, in designer units
    tolerance: float = 1.0
    max_segments: int = 16

    # Placement constraints (canvas pixels)
    max_points: int = 5
    min_vertical_spacing: float = 50.0
    min_distance_from_line: float = 30.0
    top_margin: float = 50.0
    max_left_distance: float = 200.0
    max_right_distance: float = 200.0
    min_point_distance: float = 20.0
    hit_radius: float = 12.0

    # Physical scaling of the designer canvas
    half_height: float = 2.0
    max_depth: float = 1.0

    # Seam C0 / C1 jumps above these are logged
    seam_tolerance: float = 1e-9
    slope_tolerance: float = 1e-6
