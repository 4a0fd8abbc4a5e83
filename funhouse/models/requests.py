"""API request models."""

from __future__ import annotations

import math

from pydantic import BaseModel, Field

from funhouse.engine.config import Backdrop, FitStrategy, ProfileFamily, SceneConfig
from funhouse.models.geometry import BoundsModel, PointModel, RevolutionModel, SegmentModel

Color = tuple[float, float, float, float]


class SceneModel(BaseModel):
    family: ProfileFamily = ProfileFamily.EXTRUDED
    mirror_dist: float = Field(default=2.0, gt=0)
    mirror_half_width: float = Field(default=1.5, gt=0)
    mirror_half_height: float = Field(default=2.0, gt=0)
    mirror_radius: float = Field(default=1.5, gt=0)
    image_plane_dist: float = Field(default=0.5, ge=0)
    image_size_x: float = Field(default=1.6, gt=0)
    image_size_y: float = Field(default=1.2, gt=0)
    fov: float = Field(
        default=math.pi / 3.0, gt=0, lt=math.pi, description="Vertical field of view (radians)"
    )
    edge_fade_start: float = Field(default=0.9, ge=0, le=1)
    reflectivity: float = Field(default=0.95, ge=0)
    fresnel_strength: float = Field(default=0.25, ge=0)
    background: Color = (1.0, 1.0, 1.0, 1.0)
    backdrop: Backdrop = Backdrop.SOLID

    def to_config(self, **overrides) -> SceneConfig:
        return SceneConfig(**{**self.model_dump(), **overrides})


class ProfileRequest(BaseModel):
    anchors: list[PointModel] = Field(default_factory=list, description="Anchor points, any order")
    strategy: FitStrategy = Field(default=FitStrategy.HYBRID, description="Curve-fitting strategy")
    tolerance: float = Field(default=1.0, gt=0, description="Approximation tolerance (canvas px with bounds)")
    bounds: BoundsModel | None = Field(
        default=None,
        description="Canvas geometry; when set, anchors are canvas pixels",
    )
    half_height: float = Field(default=2.0, gt=0)
    max_depth: float = Field(default=1.0, gt=0)
    publish: bool = Field(default=True, description="Make this the current profile for /render")
    legacy_lines: bool = Field(default=False, description="Also return the straight-piece line export")


class RenderRequest(BaseModel):
    frame_png: str = Field(..., description="Base64-encoded PNG/JPEG webcam frame")
    width: int = Field(default=160, gt=0, le=1920)
    height: int = Field(default=120, gt=0, le=1080)
    scene: SceneModel = Field(default_factory=SceneModel)
    anchors: list[PointModel] | None = Field(default=None, description="Fit a profile from these anchors")
    strategy: FitStrategy = FitStrategy.HYBRID
    tolerance: float = Field(default=1.0, gt=0)
    bounds: BoundsModel | None = None
    segments: list[SegmentModel] | None = Field(default=None, description="Explicit extruded profile")
    revolution: RevolutionModel = Field(default_factory=RevolutionModel)


class DiagramRequest(BaseModel):
    revolution: RevolutionModel = Field(default_factory=RevolutionModel)
    scene: SceneModel = Field(default_factory=SceneModel)
    samples: int = Field(default=100, ge=2, le=2000)
    rays: int = Field(default=7, ge=0, le=64)
