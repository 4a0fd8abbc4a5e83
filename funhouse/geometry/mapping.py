"""Designer canvas ↔ physical mirror coordinates.

Canvas: pixels, y grows downward, the undeformed mirror is the vertical
line x = line_x between y_top and y_bottom. Physical: (depth, height) with
height in [−half_height, half_height] and depth in mirror units. A canvas
point left of the line (x < line_x) is closer to the camera (negative depth).
"""

from __future__ import annotations

from dataclasses import dataclass

from funhouse.geometry.bezier import Point, QuadraticBezier


@dataclass(frozen=True)
class CanvasBounds:
    line_x: float = 400.0
    y_top: float = 50.0
    y_bottom: float = 550.0

    @property
    def height(self) -> float:
        return self.y_bottom - self.y_top


@dataclass(frozen=True)
class CanvasMapping:
    bounds: CanvasBounds
    half_height: float = 2.0
    max_depth: float = 1.0

    def to_physical(self, point: Point) -> Point:
        x, y = point
        b = self.bounds
        height = (y - b.y_top) / b.height * (2 * self.half_height) - self.half_height
        depth = -((b.line_x - x) / b.line_x * self.max_depth)
        return (depth, height)

    def to_canvas(self, point: Point) -> Point:
        depth, height = point
        b = self.bounds
        y = (height + self.half_height) / (2 * self.half_height) * b.height + b.y_top
        x = b.line_x + depth / self.max_depth * b.line_x
        return (x, y)

    def quadratic_to_physical(self, quad: QuadraticBezier) -> QuadraticBezier:
        return QuadraticBezier(
            self.to_physical(quad.start),
            self.to_physical(quad.cp),
            self.to_physical(quad.end),
        )
