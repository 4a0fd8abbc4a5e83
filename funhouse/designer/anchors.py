"""Anchor editing — add / drag / delete with stable ids, kept sorted by y.

Every operation returns a new AnchorSet; an existing set is never mutated,
so a curve derived from it stays valid while the user keeps editing.
Coordinates are designer canvas pixels (see ``funhouse.geometry.mapping``).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace

from funhouse.engine.config import DesignerConfig
from funhouse.geometry.bezier import Point
from funhouse.geometry.mapping import CanvasBounds


class AnchorRejected(ValueError):
    """An add/move would break a placement constraint."""


@dataclass(frozen=True)
class AnchorPoint:
    x: float
    y: float
    id: int

    @property
    def point(self) -> Point:
        return (self.x, self.y)


@dataclass(frozen=True)
class AnchorSet:
    bounds: CanvasBounds = field(default_factory=CanvasBounds)
    config: DesignerConfig = field(default_factory=DesignerConfig)
    anchors: tuple[AnchorPoint, ...] = ()
    next_id: int = 0

    def __len__(self) -> int:
        return len(self.anchors)

    def points(self) -> list[Point]:
        return [a.point for a in self.anchors]

    def get(self, anchor_id: int) -> AnchorPoint:
        for a in self.anchors:
            if a.id == anchor_id:
                return a
        raise KeyError(anchor_id)

    def find_near(self, x: float, y: float, radius: float | None = None) -> AnchorPoint | None:
        """First anchor within ``radius`` of (x, y), for drag/delete picking."""
        radius = self.config.hit_radius if radius is None else radius
        for a in self.anchors:
            if math.hypot(a.x - x, a.y - y) < radius:
                return a
        return None

    def add(self, x: float, y: float) -> AnchorSet:
        cfg = self.config
        b = self.bounds
        if len(self.anchors) >= cfg.max_points:
            raise AnchorRejected(f"At most {cfg.max_points} anchors")
        if y < b.y_top or y > b.y_bottom:
            raise AnchorRejected("Outside the mirror's vertical extent")
        if x < b.line_x - cfg.max_left_distance or x > b.line_x + cfg.max_right_distance:
            raise AnchorRejected("Too far from the mirror line")
        if abs(x - b.line_x) < cfg.min_distance_from_line:
            raise AnchorRejected("Inside the dead zone around the mirror line")
        if y < b.y_top + cfg.top_margin:
            raise AnchorRejected("Too close to the top of the mirror")
        if any(abs(a.y - y) < cfg.min_vertical_spacing for a in self.anchors):
            raise AnchorRejected("Too close vertically to another anchor")
        if any(math.hypot(a.x - x, a.y - y) < cfg.min_point_distance for a in self.anchors):
            raise AnchorRejected("Too close to another anchor")

        new = AnchorPoint(x=x, y=y, id=self.next_id)
        return replace(self, anchors=_sorted((*self.anchors, new)), next_id=self.next_id + 1)

    def move(self, anchor_id: int, x: float, y: float) -> AnchorSet:
        """Drag an anchor. Position is clamped; spacing violations are rejected."""
        self.get(anchor_id)
        cfg = self.config
        b = self.bounds

        x = max(b.line_x - cfg.max_left_distance, min(b.line_x + cfg.max_right_distance, x))
        y = max(b.y_top, min(b.y_bottom, y))
        if abs(x - b.line_x) < cfg.min_distance_from_line:
            x = (
                b.line_x - cfg.min_distance_from_line
                if x < b.line_x
                else b.line_x + cfg.min_distance_from_line
            )
        y = max(y, b.y_top + cfg.top_margin)

        moved = _sorted(
            tuple(replace(a, x=x, y=y) if a.id == anchor_id else a for a in self.anchors)
        )
        for upper, lower in zip(moved, moved[1:]):
            if abs(upper.y - lower.y) < cfg.min_vertical_spacing:
                raise AnchorRejected("Too close vertically to another anchor")
        return replace(self, anchors=moved)

    def remove(self, anchor_id: int) -> AnchorSet:
        self.get(anchor_id)
        return replace(self, anchors=tuple(a for a in self.anchors if a.id != anchor_id))


def _sorted(anchors: tuple[AnchorPoint, ...]) -> tuple[AnchorPoint, ...]:
    return tuple(sorted(anchors, key=lambda a: (a.y, a.id)))
