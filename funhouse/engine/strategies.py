"""Curve-fitting strategy registry — one fitter per FitStrategy, registered via decorator.

Usage:
    @fitter(FitStrategy.HYBRID, description="Direct arc for one anchor, spline beyond")
    def hybrid(start, anchors, end, tolerance):
        ...

All fitters share the same signature and are pure functions of their input.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable

from funhouse.engine.config import FitStrategy
from funhouse.geometry.bezier import Point, QuadraticBezier
from funhouse.geometry.fitting import (
    s_curves,
    single_arc,
    spline_to_quadratics,
    straight_profile,
)

logger = logging.getLogger(__name__)

FitterFn = Callable[[Point, Sequence[Point], Point, float], list[QuadraticBezier]]


@dataclass(frozen=True)
class FitterSpec:
    strategy: FitStrategy
    fn: FitterFn
    description: str = ""


class FitterRegistry:
    def __init__(self) -> None:
        self._fitters: dict[FitStrategy, FitterSpec] = {}

    def register(self, spec: FitterSpec) -> None:
        if spec.strategy in self._fitters:
            raise ValueError(f"Duplicate fitter: {spec.strategy.value}")
        self._fitters[spec.strategy] = spec
        logger.debug("Registered fitter %s", spec.strategy.value)

    def get(self, strategy: FitStrategy | str) -> FitterSpec:
        return self._fitters[FitStrategy(strategy)]

    def all(self) -> list[FitterSpec]:
        return sorted(self._fitters.values(), key=lambda s: s.strategy.value)

    @property
    def count(self) -> int:
        return len(self._fitters)


# Module-level singleton
_registry = FitterRegistry()


def get_registry() -> FitterRegistry:
    return _registry


def fitter(strategy: FitStrategy, *, description: str = ""):
    """Decorator to register a fitting function for ``strategy``."""

    def decorator(fn: FitterFn) -> FitterFn:
        _registry.register(FitterSpec(strategy=strategy, fn=fn, description=description))
        return fn

    return decorator


def fit_curve(
    strategy: FitStrategy | str,
    start: Point,
    anchors: Sequence[Point],
    end: Point,
    tolerance: float = 1.0,
) -> list[QuadraticBezier]:
    """Run the registered fitter for ``strategy``."""
    return _registry.get(strategy).fn(start, anchors, end, tolerance)


@fitter(
    FitStrategy.POINT_PASSTHROUGH,
    description="Single arc for one anchor, mirrored S-curve pairs beyond",
)
def point_passthrough(
    start: Point, anchors: Sequence[Point], end: Point, tolerance: float
) -> list[QuadraticBezier]:
    if not anchors:
        return straight_profile(start, end)
    if len(anchors) == 1:
        return single_arc(start, anchors[0], end)
    return s_curves(start, anchors, end)


@fitter(
    FitStrategy.SPRING_SPLINE,
    description="Catmull-Rom spline through every anchor, adaptive quadratics",
)
def spring_spline(
    start: Point, anchors: Sequence[Point], end: Point, tolerance: float
) -> list[QuadraticBezier]:
    if not anchors:
        return straight_profile(start, end)
    return spline_to_quadratics([start, *anchors, end], tolerance)


@fitter(
    FitStrategy.HYBRID,
    description="Direct arc for one anchor, spline for two or more",
)
def hybrid(
    start: Point, anchors: Sequence[Point], end: Point, tolerance: float
) -> list[QuadraticBezier]:
    if not anchors:
        return straight_profile(start, end)
    if len(anchors) == 1:
        return single_arc(start, anchors[0], end)
    return spline_to_quadratics([start, *anchors, end], tolerance)
