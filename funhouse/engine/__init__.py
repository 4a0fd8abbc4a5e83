"""Funhouse mirror curve engine."""

from funhouse.engine.config import DesignerConfig, FitStrategy, ProfileFamily, SceneConfig
from funhouse.engine.context import RenderContext
from funhouse.engine.pipeline import CurvePipeline, DesignSession, ProfilePublisher, ProfileResult
from funhouse.engine.strategies import fit_curve, fitter, get_registry

__all__ = [
    "DesignerConfig",
    "FitStrategy",
    "ProfileFamily",
    "SceneConfig",
    "RenderContext",
    "CurvePipeline",
    "DesignSession",
    "ProfilePublisher",
    "ProfileResult",
    "fit_curve",
    "fitter",
    "get_registry",
]
