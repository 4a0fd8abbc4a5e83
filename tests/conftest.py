"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from funhouse.engine.config import SceneConfig
from funhouse.geometry.mapping import CanvasBounds


# Designer canvas used by the reference UI: 800x600, mirror line at x=400.
CANVAS = CanvasBounds(line_x=400.0, y_top=50.0, y_bottom=550.0)

# Two anchors either side of the line, well spaced.
BULGE_ANCHORS = [(300.0, 200.0), (480.0, 400.0)]

# Physical single-anchor case: boundaries at depth 0, y = ±1, anchor 0.5 toward the camera.
HALF_HEIGHT = 1.0
MIDPOINT_ANCHOR = (-0.5, 0.0)

# Flat mirror with the image plane sized to the mirror.
FLAT_SCENE = SceneConfig(
    mirror_dist=2.0,
    mirror_half_width=1.5,
    mirror_half_height=1.5,
    image_plane_dist=0.5,
    image_size_x=3.0,
    image_size_y=3.0,
)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(20240601)


@pytest.fixture
def canvas() -> CanvasBounds:
    return CANVAS


@pytest.fixture
def grey_frame() -> np.ndarray:
    frame = np.full((48, 64, 4), 128, dtype=np.uint8)
    frame[..., 3] = 255
    return frame


@pytest.fixture
def quadrant_frame() -> np.ndarray:
    """2x2 RGB frame: red, green / blue, white."""
    return np.array(
        [
            [[255, 0, 0], [0, 255, 0]],
            [[0, 0, 255], [255, 255, 255]],
        ],
        dtype=np.uint8,
    )
