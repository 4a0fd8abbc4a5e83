"""Bezier primitives — immutable cubic/quadratic curves. No engine imports."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

Point = tuple[float, float]


def _lerp(p: Point, q: Point, t: float) -> Point:
    return (p[0] + t * (q[0] - p[0]), p[1] + t * (q[1] - p[1]))


def midpoint(p: Point, q: Point) -> Point:
    return ((p[0] + q[0]) / 2, (p[1] + q[1]) / 2)


@dataclass(frozen=True)
class CubicBezier:
    start: Point
    cp1: Point
    cp2: Point
    end: Point

    def evaluate(self, t: NDArray[np.float64] | float) -> NDArray[np.float64]:
        """Point(s) on the curve. Scalar t → (2,), array t → Nx2."""
        t = np.asarray(t, dtype=np.float64)
        mt = 1.0 - t
        w0 = mt**3
        w1 = 3 * mt**2 * t
        w2 = 3 * mt * t**2
        w3 = t**3
        pts = np.array([self.start, self.cp1, self.cp2, self.end], dtype=np.float64)
        return np.multiply.outer(w0, pts[0]) + np.multiply.outer(w1, pts[1]) + np.multiply.outer(
            w2, pts[2]
        ) + np.multiply.outer(w3, pts[3])

    def subdivide(self, t: float = 0.5) -> tuple[CubicBezier, CubicBezier]:
        """De Casteljau split into (left, right)."""
        p01 = _lerp(self.start, self.cp1, t)
        p12 = _lerp(self.cp1, self.cp2, t)
        p23 = _lerp(self.cp2, self.end, t)
        p012 = _lerp(p01, p12, t)
        p123 = _lerp(p12, p23, t)
        p0123 = _lerp(p012, p123, t)
        return (
            CubicBezier(self.start, p01, p012, p0123),
            CubicBezier(p0123, p123, p23, self.end),
        )


@dataclass(frozen=True)
class QuadraticBezier:
    start: Point
    cp: Point
    end: Point

    def evaluate(self, t: NDArray[np.float64] | float) -> NDArray[np.float64]:
        """Point(s) on the curve. Scalar t → (2,), array t → Nx2."""
        t = np.asarray(t, dtype=np.float64)
        mt = 1.0 - t
        pts = np.array([self.start, self.cp, self.end], dtype=np.float64)
        return (
            np.multiply.outer(mt**2, pts[0])
            + np.multiply.outer(2 * mt * t, pts[1])
            + np.multiply.outer(t**2, pts[2])
        )

    def reversed(self) -> QuadraticBezier:
        return QuadraticBezier(self.end, self.cp, self.start)

    @classmethod
    def through(cls, start: Point, passthrough: Point, end: Point) -> QuadraticBezier:
        """Quadratic whose t=0.5 point is ``passthrough``.

        B(0.5) = 0.25·start + 0.5·cp + 0.25·end, solved for cp.
        """
        cp = (
            2 * passthrough[0] - 0.5 * (start[0] + end[0]),
            2 * passthrough[1] - 0.5 * (start[1] + end[1]),
        )
        return cls(start, cp, end)

    @classmethod
    def line(cls, start: Point, end: Point) -> QuadraticBezier:
        return cls(start, midpoint(start, end), end)


def sample_parameters(samples: int = 20) -> NDArray[np.float64]:
    """``samples`` intervals → samples + 1 parameter values in [0, 1]."""
    return np.linspace(0.0, 1.0, samples + 1)


def max_deviation(cubic: CubicBezier, quad: QuadraticBezier, samples: int = 20) -> float:
    """Max Euclidean distance between the curves at matching parameters."""
    ts = sample_parameters(samples)
    diff = cubic.evaluate(ts) - quad.evaluate(ts)
    return float(np.max(np.sqrt(np.sum(diff**2, axis=1))))
