"""Tests for curve fitting constructions and canvas mapping."""

from __future__ import annotations

import numpy as np
import pytest

from funhouse.geometry.bezier import QuadraticBezier
from funhouse.geometry.fitting import (
    catmull_rom_to_cubic,
    evaluate_spline,
    s_curves,
    sample_spline,
    single_arc,
    spline_cubics,
    spline_to_quadratics,
    straight_profile,
)
from funhouse.geometry.mapping import CanvasMapping
from tests.conftest import CANVAS


POINTS = [(400.0, 50.0), (300.0, 200.0), (480.0, 400.0), (400.0, 550.0)]


def test_catmull_rom_span_matches_spline():
    cubic = catmull_rom_to_cubic(*POINTS)
    # Span 1 of 3 covers global t in [1/3, 2/3].
    for lt in (0.0, 0.25, 0.5, 0.75, 1.0):
        expected = evaluate_spline(POINTS, (1 + lt) / 3)
        assert np.allclose(cubic.evaluate(lt), expected)


def test_spline_cubics_pass_through_points():
    cubics = spline_cubics(POINTS)
    assert len(cubics) == 3
    assert [c.start for c in cubics] == POINTS[:-1]
    assert [c.end for c in cubics] == POINTS[1:]


def test_spline_to_quadratics_chain():
    quads = spline_to_quadratics(POINTS, tolerance=0.5)
    assert quads[0].start == POINTS[0]
    assert quads[-1].end == POINTS[-1]
    for a, b in zip(quads, quads[1:]):
        assert a.end == b.start
    ends = {q.end for q in quads}
    assert POINTS[1] in ends and POINTS[2] in ends


def test_sample_spline_endpoints():
    pts = sample_spline(POINTS, count=30)
    assert pts.shape == (31, 2)
    assert np.allclose(pts[0], POINTS[0])
    assert np.allclose(pts[-1], POINTS[-1])


def test_straight_and_single_arc():
    (line,) = straight_profile((0.0, -1.0), (0.0, 1.0))
    assert line.cp == (0.0, 0.0)
    (arc,) = single_arc((0.0, -1.0), (-0.5, 0.0), (0.0, 1.0))
    assert np.allclose(arc.evaluate(0.5), (-0.5, 0.0))


def test_s_curves_interpolate_with_continuous_tangents():
    start, end = POINTS[0], POINTS[-1]
    anchors = POINTS[1:3]
    quads = s_curves(start, anchors, end)
    assert len(quads) == 2 * len(anchors)
    assert quads[0].start == start and quads[-1].end == end
    for i, anchor in enumerate(anchors):
        into, out = quads[2 * i], quads[2 * i + 1]
        assert into.end == anchor and out.start == anchor
        # Mirrored control points → collinear tangent through the anchor.
        assert np.allclose(np.subtract(anchor, into.cp), np.subtract(out.cp, anchor))
    for a, b in zip(quads, quads[1:]):
        assert a.end == b.start


def test_s_curves_are_monotonic_in_y():
    quads = s_curves(POINTS[0], POINTS[1:3], POINTS[-1])
    for q in quads:
        ys = q.evaluate(np.linspace(0, 1, 50))[:, 1]
        assert np.all(np.diff(ys) >= -1e-9)


def test_canvas_mapping_round_trip():
    mapping = CanvasMapping(CANVAS, half_height=2.0, max_depth=1.0)
    assert mapping.to_physical((400.0, 50.0)) == pytest.approx((0.0, -2.0))
    assert mapping.to_physical((400.0, 550.0)) == pytest.approx((0.0, 2.0))
    depth, height = mapping.to_physical((300.0, 300.0))
    assert depth < 0.0
    assert height == pytest.approx(0.0)
    assert mapping.to_canvas((depth, height)) == pytest.approx((300.0, 300.0))


def test_quadratic_to_physical_maps_every_point():
    mapping = CanvasMapping(CANVAS)
    q = QuadraticBezier((400.0, 50.0), (350.0, 300.0), (400.0, 550.0))
    p = mapping.quadratic_to_physical(q)
    assert p.cp == pytest.approx(mapping.to_physical(q.cp))
