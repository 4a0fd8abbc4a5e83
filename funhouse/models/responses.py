"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from funhouse.models.geometry import AnchorModel, PointModel, QuadraticModel, SeamModel, SegmentModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    strategies: list[str] = Field(default_factory=list)


class StatsModel(BaseModel):
    original_segments: int = 0
    quadratic_segments: int = 0
    average_quads_per_segment: float = 0.0
    compression_ratio: float = 0.0


class ProfileResponse(BaseModel):
    segments: list[SegmentModel]
    quadratics: list[QuadraticModel] = Field(default_factory=list)
    svg_path: str = ""
    svg: str = ""
    stats: StatsModel = Field(default_factory=StatsModel)
    seams: list[SeamModel] = Field(default_factory=list)
    max_slope_jump: float = 0.0
    truncated: bool = False
    tolerance: float = Field(default=0.0, description="Tolerance the chain was fitted at")
    deviation: float = Field(default=0.0, description="Max depth gap, segments vs. quadratics")
    anchors: list[AnchorModel] = Field(default_factory=list, description="Placed canvas anchors")
    preview: list[PointModel] = Field(default_factory=list, description="Spline polyline")
    line_segments: list[SegmentModel] = Field(default_factory=list)
    version: int = 0
    processing_time_ms: float = 0.0


class RenderResponse(BaseModel):
    image_png: str
    width: int
    height: int
    hit_fraction: float = 0.0
    elapsed_ms: float = 0.0
    profile_version: int | None = None


class RayModel(BaseModel):
    angle: float
    hit: tuple[float, float] | None = None
    landing: tuple[float, float] | None = None
    behind: bool = False
    missed: bool = False


class DiagramResponse(BaseModel):
    profile: list[tuple[float, float]] = Field(default_factory=list)
    rays: list[RayModel] = Field(default_factory=list)
    mirror_dist: float = 0.0
    image_plane: float = 0.0
    svg: str = ""
