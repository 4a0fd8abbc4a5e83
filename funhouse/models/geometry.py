"""Shared geometry shapes for request/response bodies."""

from __future__ import annotations

from pydantic import BaseModel, Field

from funhouse.geometry.bezier import QuadraticBezier
from funhouse.geometry.mapping import CanvasBounds
from funhouse.geometry.polynomial import ProfileSegment, RevolutionProfile, Seam


class PointModel(BaseModel):
    x: float
    y: float


class AnchorModel(PointModel):
    id: int = Field(description="Stable anchor id, in insertion order")


class BoundsModel(BaseModel):
    """Designer canvas: mirror line at x, spanning y_top..y_bottom (pixels, y down)."""

    x: float = Field(default=400.0, gt=0, description="Canvas x of the undeformed mirror line")
    y_top: float = 50.0
    y_bottom: float = 550.0

    def to_bounds(self) -> CanvasBounds:
        return CanvasBounds(line_x=self.x, y_top=self.y_top, y_bottom=self.y_bottom)


class SegmentModel(BaseModel):
    a: float
    b: float
    c: float
    y_min: float
    y_max: float

    @classmethod
    def from_segment(cls, seg: ProfileSegment) -> SegmentModel:
        return cls(a=seg.a, b=seg.b, c=seg.c, y_min=seg.y_min, y_max=seg.y_max)

    def to_segment(self) -> ProfileSegment:
        return ProfileSegment(self.a, self.b, self.c, self.y_min, self.y_max)


class QuadraticModel(BaseModel):
    start: PointModel
    cp: PointModel
    end: PointModel

    @classmethod
    def from_quadratic(cls, q: QuadraticBezier) -> QuadraticModel:
        return cls(
            start=PointModel(x=q.start[0], y=q.start[1]),
            cp=PointModel(x=q.cp[0], y=q.cp[1]),
            end=PointModel(x=q.end[0], y=q.end[1]),
        )


class SeamModel(BaseModel):
    y: float
    value_jump: float
    slope_jump: float

    @classmethod
    def from_seam(cls, seam: Seam) -> SeamModel:
        return cls(y=seam.y, value_jump=seam.value_jump, slope_jump=seam.slope_jump)


class RevolutionModel(BaseModel):
    a2: float = Field(default=0.0, description="r⁴ coefficient")
    a1: float = Field(default=-0.3, description="r² coefficient")
    a0: float = 0.0

    def to_profile(self) -> RevolutionProfile:
        return RevolutionProfile(a2=self.a2, a1=self.a1, a0=self.a0)
