"""Tests for the anchor editor."""

from __future__ import annotations

import pytest

from funhouse.designer.anchors import AnchorRejected, AnchorSet
from funhouse.engine.config import DesignerConfig
from tests.conftest import CANVAS


@pytest.fixture
def empty() -> AnchorSet:
    return AnchorSet(bounds=CANVAS)


def test_add_keeps_sorted_with_stable_ids(empty):
    s = empty.add(300.0, 400.0).add(480.0, 200.0)
    assert [a.y for a in s.anchors] == [200.0, 400.0]
    assert [a.id for a in s.anchors] == [1, 0]
    assert s.get(0).point == (300.0, 400.0)
    assert len(empty) == 0


def test_add_rejections(empty):
    with pytest.raises(AnchorRejected, match="dead zone"):
        empty.add(410.0, 300.0)
    with pytest.raises(AnchorRejected, match="vertical extent"):
        empty.add(300.0, 10.0)
    with pytest.raises(AnchorRejected, match="far"):
        empty.add(50.0, 300.0)
    with pytest.raises(AnchorRejected, match="top"):
        empty.add(300.0, 70.0)
    s = empty.add(300.0, 300.0)
    with pytest.raises(AnchorRejected, match="vertically"):
        s.add(480.0, 320.0)


def test_add_respects_max_points(empty):
    s = empty
    for i in range(5):
        s = s.add(300.0, 120.0 + 90.0 * i)
    assert len(s) == 5
    with pytest.raises(AnchorRejected, match="At most"):
        s.add(480.0, 540.0)


def test_anchor_rejected_is_value_error():
    assert issubclass(AnchorRejected, ValueError)


def test_move_clamps_into_bounds(empty):
    s = empty.add(300.0, 300.0)
    moved = s.move(0, 395.0, 900.0)
    a = moved.get(0)
    assert a.x == 370.0
    assert a.y == 550.0
    assert s.get(0).point == (300.0, 300.0)


def test_move_resorts_and_rejects_crowding(empty):
    s = empty.add(300.0, 150.0).add(480.0, 400.0)
    swapped = s.move(0, 300.0, 500.0)
    assert [a.id for a in swapped.anchors] == [1, 0]
    with pytest.raises(AnchorRejected):
        s.move(0, 300.0, 420.0)


def test_remove_and_unknown_id(empty):
    s = empty.add(300.0, 200.0).add(480.0, 400.0)
    s = s.remove(0)
    assert [a.id for a in s.anchors] == [1]
    with pytest.raises(KeyError):
        s.remove(0)
    with pytest.raises(KeyError):
        s.move(7, 300.0, 300.0)
    # Ids are never reused.
    assert s.add(300.0, 200.0).get(2).y == 200.0


def test_find_near(empty):
    s = empty.add(300.0, 200.0)
    assert s.find_near(305.0, 203.0).id == 0
    assert s.find_near(330.0, 200.0) is None
    assert s.find_near(330.0, 200.0, radius=40.0) is not None


def test_custom_config_limits():
    s = AnchorSet(bounds=CANVAS, config=DesignerConfig(max_points=1))
    s = s.add(300.0, 300.0)
    with pytest.raises(AnchorRejected):
        s.add(480.0, 450.0)
