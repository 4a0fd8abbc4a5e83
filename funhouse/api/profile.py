"""POST /api/profile — fit anchors and convert to mirror profile segments."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from funhouse.dependencies import get_publisher
from funhouse.designer.anchors import AnchorRejected, AnchorSet
from funhouse.engine.config import DesignerConfig, FitStrategy
from funhouse.engine.pipeline import CurvePipeline, ProfilePublisher
from funhouse.geometry.bezier import Point, QuadraticBezier
from funhouse.geometry.mapping import CanvasMapping
from funhouse.models.geometry import (
    AnchorModel,
    BoundsModel,
    PointModel,
    QuadraticModel,
    SeamModel,
    SegmentModel,
)
from funhouse.models.requests import ProfileRequest
from funhouse.models.responses import ProfileResponse, StatsModel
from funhouse.svg.serializer import conversion_stats, profile_svg, quadratics_to_path

router = APIRouter()


def build_pipeline(
    strategy: FitStrategy,
    tolerance: float,
    bounds: BoundsModel | None,
    half_height: float = 2.0,
    max_depth: float = 1.0,
) -> CurvePipeline:
    config = DesignerConfig(
        strategy=strategy,
        tolerance=tolerance,
        half_height=half_height,
        max_depth=max_depth,
    )
    mapping = None
    if bounds is not None:
        mapping = CanvasMapping(bounds.to_bounds(), half_height=half_height, max_depth=max_depth)
    return CurvePipeline(config, mapping)


def place_anchors(pipeline: CurvePipeline, points: Sequence[PointModel]) -> AnchorSet | None:
    """Canvas anchors through the designer's placement rules; 422 on the first rejection.

    Physical-coordinate requests (no mapping) are not placed and return None.
    """
    if pipeline.mapping is None:
        return None
    anchors = AnchorSet(bounds=pipeline.mapping.bounds, config=pipeline.config)
    for p in points:
        try:
            anchors = anchors.add(p.x, p.y)
        except AnchorRejected as e:
            raise HTTPException(status_code=422, detail=f"Anchor ({p.x:g}, {p.y:g}) rejected: {e}") from e
    return anchors


def anchor_points(pipeline: CurvePipeline, points: Sequence[PointModel]) -> list[Point]:
    placed = place_anchors(pipeline, points)
    if placed is None:
        return [(p.x, p.y) for p in points]
    return placed.points()


@router.post("/profile", response_model=ProfileResponse)
async def fit_profile(
    req: ProfileRequest,
    publisher: ProfilePublisher = Depends(get_publisher),
) -> ProfileResponse:
    pipeline = build_pipeline(req.strategy, req.tolerance, req.bounds, req.half_height, req.max_depth)
    placed = place_anchors(pipeline, req.anchors)
    anchors = placed.points() if placed is not None else [(p.x, p.y) for p in req.anchors]
    result = pipeline.run(anchors)
    version = publisher.publish(result) if req.publish else publisher.version

    # Report the chain in the caller's coordinates.
    quads = list(result.quadratics)
    if pipeline.mapping is not None:
        m = pipeline.mapping
        quads = [QuadraticBezier(m.to_canvas(q.start), m.to_canvas(q.cp), m.to_canvas(q.end)) for q in quads]

    start, end = pipeline.boundaries()
    stats = conversion_stats([start, *sorted(anchors, key=lambda p: p[1]), end], quads)
    svg = ""
    if req.bounds is not None:
        b = req.bounds
        svg = profile_svg(quads, anchors, canvas_w=2 * b.x, canvas_h=b.y_bottom + b.y_top, line_x=b.x)
    lines = pipeline.line_profile(anchors) if req.legacy_lines else ()

    return ProfileResponse(
        segments=[SegmentModel.from_segment(s) for s in result.segments],
        quadratics=[QuadraticModel.from_quadratic(q) for q in quads],
        svg_path=quadratics_to_path(quads),
        svg=svg,
        stats=StatsModel(**asdict(stats)),
        seams=[SeamModel.from_seam(s) for s in result.seams],
        max_slope_jump=result.max_slope_jump,
        truncated=result.truncated,
        tolerance=result.tolerance,
        deviation=result.deviation,
        anchors=[AnchorModel(x=a.x, y=a.y, id=a.id) for a in placed.anchors] if placed is not None else [],
        preview=[PointModel(x=x, y=y) for x, y in pipeline.preview(anchors)],
        line_segments=[SegmentModel.from_segment(s) for s in lines],
        version=version,
        processing_time_ms=result.elapsed_ms,
    )
