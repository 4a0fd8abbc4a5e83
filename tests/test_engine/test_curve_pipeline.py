"""Tests for the curve pipeline and profile publishing."""

from __future__ import annotations

import threading

import pytest

from funhouse.designer.anchors import AnchorSet
from funhouse.engine.config import DesignerConfig, FitStrategy
from funhouse.engine.pipeline import CurvePipeline, DesignSession, ProfilePublisher
from funhouse.geometry.mapping import CanvasMapping
from funhouse.geometry.polynomial import flat_profile, profile_deviation
from tests.conftest import BULGE_ANCHORS, CANVAS, HALF_HEIGHT, MIDPOINT_ANCHOR


def _canvas_pipeline(strategy: FitStrategy = FitStrategy.HYBRID) -> CurvePipeline:
    return CurvePipeline(DesignerConfig(strategy=strategy), CanvasMapping(CANVAS))


def test_single_anchor_physical():
    pipeline = CurvePipeline(DesignerConfig(half_height=HALF_HEIGHT))
    result = pipeline.run([MIDPOINT_ANCHOR])
    (seg,) = result.segments
    assert (seg.y_min, seg.y_max) == (-1.0, 1.0)
    assert seg.evaluate(0.0) == pytest.approx(-0.5)
    assert seg.local_coefficients[2] == pytest.approx(0.0, abs=1e-12)
    assert result.anchor_count == 1


def test_no_anchors_gives_flat_mirror():
    result = _canvas_pipeline().run([])
    (seg,) = result.segments
    assert seg.a == pytest.approx(0.0) and seg.b == pytest.approx(0.0)
    assert seg.c == pytest.approx(0.0)


@pytest.mark.parametrize("strategy", list(FitStrategy))
@pytest.mark.parametrize("count", [1, 2, 3, 5])
def test_partition_invariant(strategy, count):
    anchors = [(300.0 + 40 * (i % 2) * 4, 120.0 + 85.0 * i) for i in range(count)]
    result = _canvas_pipeline(strategy).run(anchors)
    segs = result.segments
    assert segs[0].y_min == -2.0
    assert segs[-1].y_max == 2.0
    for left, right in zip(segs, segs[1:]):
        assert left.y_max == right.y_min
    assert result.max_value_jump < 1e-7


def test_idempotent():
    pipeline = _canvas_pipeline()
    first = pipeline.run(BULGE_ANCHORS)
    second = pipeline.run(BULGE_ANCHORS)
    assert first.segments == second.segments


def test_anchor_order_does_not_matter():
    pipeline = _canvas_pipeline()
    assert pipeline.run(BULGE_ANCHORS).segments == pipeline.run(BULGE_ANCHORS[::-1]).segments


def test_left_of_line_is_toward_camera():
    result = _canvas_pipeline().run([(300.0, 300.0)])
    (seg,) = result.segments
    assert seg.evaluate(0.0) < 0.0


def test_pipeline_from_anchor_set():
    anchors = AnchorSet(bounds=CANVAS).add(300.0, 200.0).add(480.0, 400.0)
    result = _canvas_pipeline().run(anchors.points())
    assert len(result.segments) >= 2


def test_publisher_replaces_snapshot_without_mutation():
    publisher = ProfilePublisher(half_height=2.0)
    before = publisher.snapshot()
    assert before.segments == flat_profile(2.0)

    result = _canvas_pipeline().run(BULGE_ANCHORS)
    version = publisher.publish(result)
    assert version == 1 == publisher.version
    assert publisher.snapshot() is result
    assert before.segments == flat_profile(2.0)


def test_publisher_concurrent_readers_see_whole_results():
    publisher = ProfilePublisher()
    pipeline = _canvas_pipeline()
    results = [pipeline.run([(300.0, 120.0 + 40 * i)]) for i in range(5)]
    valid = {id(r) for r in results} | {id(publisher.snapshot())}
    seen = []

    def reader():
        for _ in range(200):
            seen.append(id(publisher.snapshot()))

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for r in results:
        publisher.publish(r)
    for t in threads:
        t.join()
    assert set(seen) <= valid
    assert publisher.version == len(results)


def test_design_session_publishes():
    session = DesignSession(_canvas_pipeline())
    result = session.update(BULGE_ANCHORS)
    assert session.publisher.snapshot() is result


@pytest.mark.parametrize("strategy", list(FitStrategy))
def test_profile_is_c1_for_every_strategy(strategy):
    result = _canvas_pipeline(strategy).run([(300.0, 150.0), (470.0, 420.0)])
    assert len(result.seams) >= 1
    assert result.max_slope_jump < 1e-6
    assert result.max_value_jump < 1e-7


# Five anchors zig-zagging across the line: 24 quadratics at 1 px.
ZIGZAG_ANCHORS = [(250.0, 120.0), (560.0, 210.0), (250.0, 300.0), (560.0, 390.0), (250.0, 480.0)]


def test_segment_cap_refits_before_truncating():
    anchors = AnchorSet(bounds=CANVAS)
    for x, y in ZIGZAG_ANCHORS:
        anchors = anchors.add(x, y)
    pipeline = _canvas_pipeline(FitStrategy.HYBRID)
    result = pipeline.run(anchors.points())

    assert not result.truncated
    assert len(result.segments) <= pipeline.config.max_segments
    assert result.tolerance > pipeline.config.tolerance
    assert result.deviation < 0.15
    assert profile_deviation(result.segments, result.quadratics) == result.deviation
    assert result.max_slope_jump < 1e-6


def test_segment_cap_falls_back_to_tail(caplog):
    pipeline = CurvePipeline(
        DesignerConfig(strategy=FitStrategy.SPRING_SPLINE, max_segments=4), CanvasMapping(CANVAS)
    )
    with caplog.at_level("WARNING"):
        result = pipeline.run(ZIGZAG_ANCHORS)
    assert result.truncated
    assert len(result.segments) == 4
    assert result.segments[-1].y_max == 2.0
    # Bottom boundary sits on the mirror line.
    assert result.segments[-1].evaluate(2.0) == pytest.approx(0.0, abs=1e-9)
    assert result.max_slope_jump < 1e-6
    assert "truncating" in caplog.text


def test_line_profile_export():
    pipeline = _canvas_pipeline()
    segments = pipeline.line_profile(BULGE_ANCHORS)
    assert len(segments) == pipeline.config.max_segments
    assert all(s.a == pytest.approx(0.0, abs=1e-9) for s in segments)
    assert segments[0].y_min == -2.0 and segments[-1].y_max == 2.0
    for left, right in zip(segments, segments[1:]):
        assert left.y_max == right.y_min


def test_preview_passes_through_anchors():
    pipeline = _canvas_pipeline()
    points = pipeline.preview(BULGE_ANCHORS, count=30)
    assert len(points) == 31
    assert points[0] == (400.0, 50.0)
    assert points[-1] == (400.0, 550.0)
    # Three spans, anchors at t = 1/3 and 2/3.
    assert points[10] == pytest.approx(BULGE_ANCHORS[0])
    assert points[20] == pytest.approx(BULGE_ANCHORS[1])
