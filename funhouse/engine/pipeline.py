"""Curve pipeline — anchors → quadratic chain → partitioned profile segments.

Runs once per edit. Results are immutable and handed to renderers through a
ProfilePublisher, which swaps the whole result in one reference assignment.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from funhouse.engine.config import DesignerConfig
from funhouse.engine.strategies import fit_curve
from funhouse.geometry.bezier import Point, QuadraticBezier
from funhouse.geometry.fitting import sample_spline
from funhouse.geometry.mapping import CanvasMapping
from funhouse.geometry.polynomial import (
    ProfileSegment,
    Seam,
    build_profile,
    flat_profile,
    line_segments_to_profile,
    partition,
    profile_deviation,
    seam_report,
)

logger = logging.getLogger(__name__)

# Tolerance doublings tried before the segment cap truncates the chain
MAX_REFITS = 12


@dataclass(frozen=True)
class ProfileResult:
    """Output of one pipeline run. Quadratics are in physical (depth, height)."""

    segments: tuple[ProfileSegment, ...]
    quadratics: tuple[QuadraticBezier, ...] = ()
    seams: tuple[Seam, ...] = ()
    truncated: bool = False
    anchor_count: int = 0
    # Tolerance the chain was finally fitted at (>= the configured one)
    tolerance: float = 0.0
    # Largest depth gap between the segments and the quadratic chain
    deviation: float = 0.0
    elapsed_ms: float = 0.0

    @property
    def max_value_jump(self) -> float:
        return max((s.value_jump for s in self.seams), default=0.0)

    @property
    def max_slope_jump(self) -> float:
        return max((s.slope_jump for s in self.seams), default=0.0)


class CurvePipeline:
    """Fits the configured strategy and converts the result to profile segments.

    With a ``mapping``, anchors are canvas pixels and the curve is fitted in
    canvas space (tolerance in pixels) before being mapped to physical
    coordinates. Without one, anchors are physical (depth, height) points.
    """

    def __init__(
        self,
        config: DesignerConfig | None = None,
        mapping: CanvasMapping | None = None,
    ) -> None:
        self.config = config or DesignerConfig()
        self.mapping = mapping

    @property
    def half_height(self) -> float:
        if self.mapping is not None:
            return self.mapping.half_height
        return self.config.half_height

    def boundaries(self) -> tuple[Point, Point]:
        if self.mapping is not None:
            b = self.mapping.bounds
            return (b.line_x, b.y_top), (b.line_x, b.y_bottom)
        h = self.half_height
        return (0.0, -h), (0.0, h)

    def _to_physical(self, point: Point) -> Point:
        return self.mapping.to_physical(point) if self.mapping is not None else point

    def fit(self, anchors: Sequence[Point]) -> tuple[list[QuadraticBezier], float]:
        """Quadratic chain within the segment cap, coarsening the tolerance as needed.

        Returns (quads, tolerance used). Only once MAX_REFITS doublings fail
        does the chain exceed ``max_segments``.
        """
        start, end = self.boundaries()
        tolerance = self.config.tolerance
        quads = fit_curve(self.config.strategy, start, anchors, end, tolerance)
        for _ in range(MAX_REFITS):
            if len(quads) <= self.config.max_segments:
                break
            tolerance *= 2.0
            logger.debug("%d quadratics over the cap, refitting at tolerance %.3g", len(quads), tolerance)
            quads = fit_curve(self.config.strategy, start, anchors, end, tolerance)
        return quads, tolerance

    def run(self, anchors: Sequence[Point]) -> ProfileResult:
        start_time = time.perf_counter()
        anchors = sorted(anchors, key=lambda p: p[1])

        quads, tolerance = self.fit(anchors)
        if tolerance != self.config.tolerance:
            logger.info(
                "Profile coarsened from tolerance %.3g to %.3g to fit %d segments",
                self.config.tolerance,
                tolerance,
                self.config.max_segments,
            )
        if self.mapping is not None:
            quads = [self.mapping.quadratic_to_physical(q) for q in quads]

        h = self.half_height
        segments, truncated = build_profile(quads, -h, h, self.config.max_segments)
        seams = seam_report(segments)
        for seam in seams:
            c0 = seam.value_jump > self.config.seam_tolerance
            c1 = seam.slope_jump > self.config.slope_tolerance
            if c0 or c1:
                logger.warning(
                    "Profile seam at y=%.4f jumps by %.3g (slope %.3g)",
                    seam.y,
                    seam.value_jump,
                    seam.slope_jump,
                )
        deviation = profile_deviation(segments, quads)

        elapsed = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "Profile: %d anchors → %d quadratics → %d segments in %.2fms (%s, off by %.3g)",
            len(anchors),
            len(quads),
            len(segments),
            elapsed,
            self.config.strategy.value,
            deviation,
        )
        return ProfileResult(
            segments=segments,
            quadratics=tuple(quads),
            seams=tuple(seams),
            truncated=truncated,
            anchor_count=len(anchors),
            tolerance=tolerance,
            deviation=deviation,
            elapsed_ms=round(elapsed, 3),
        )

    def preview(self, anchors: Sequence[Point], count: int = 30) -> list[Point]:
        """Catmull-Rom polyline through the boundaries and anchors, in input coordinates."""
        start, end = self.boundaries()
        points = [start, *sorted(anchors, key=lambda p: p[1]), end]
        return [(float(x), float(y)) for x, y in sample_spline(points, count)]

    def line_profile(self, anchors: Sequence[Point]) -> tuple[ProfileSegment, ...]:
        """Straight-piece profile from ``max_segments`` spline samples (legacy line export)."""
        pts = [self._to_physical(p) for p in self.preview(anchors, self.config.max_segments)]
        lines = [(z0, y0, z1, y1) for (z0, y0), (z1, y1) in zip(pts, pts[1:]) if y1 != y0]
        segments = sorted(line_segments_to_profile(lines), key=lambda s: s.y_min)
        if not segments:
            return flat_profile(self.half_height)
        h = self.half_height
        return partition(segments, -h, h)


class ProfilePublisher:
    """Holds the current ProfileResult; replaced whole, never edited in place."""

    def __init__(self, initial: ProfileResult | None = None, half_height: float = 2.0) -> None:
        self._lock = threading.Lock()
        self._current = initial or ProfileResult(segments=flat_profile(half_height))
        self._version = 0

    def publish(self, result: ProfileResult) -> int:
        with self._lock:
            self._current = result
            self._version += 1
            version = self._version
        logger.debug("Published profile v%d (%d segments)", version, len(result.segments))
        return version

    def snapshot(self) -> ProfileResult:
        with self._lock:
            return self._current

    @property
    def version(self) -> int:
        with self._lock:
            return self._version


@dataclass
class DesignSession:
    """Glue for one designer: re-derives and publishes on every edit."""

    pipeline: CurvePipeline
    publisher: ProfilePublisher = field(default_factory=ProfilePublisher)

    def update(self, anchors: Sequence[Point]) -> ProfileResult:
        result = self.pipeline.run(anchors)
        self.publisher.publish(result)
        return result
