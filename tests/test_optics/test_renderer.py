"""Tests for the tiled frame renderer and the cross-section diagram."""

from __future__ import annotations

import numpy as np
import pytest

from funhouse.engine.config import ProfileFamily, SceneConfig
from funhouse.engine.context import RenderContext
from funhouse.geometry.polynomial import RevolutionProfile
from funhouse.optics.diagram import cross_section
from funhouse.optics.renderer import camera_rays, render_frame
from tests.conftest import FLAT_SCENE


def test_camera_rays_centre_and_corners():
    d = camera_rays(3, 3, np.pi / 2)
    assert d.shape == (9, 3)
    assert np.allclose(np.linalg.norm(d, axis=1), 1.0)
    assert d[4] == pytest.approx([0.0, 0.0, 1.0])
    # Row 0 is the top of the image (+y), column 0 the left (−x).
    assert d[0, 0] < 0 and d[0, 1] > 0


def test_camera_rays_row_slice():
    full = camera_rays(8, 6, 1.0)
    band = camera_rays(8, 6, 1.0, slice(2, 4))
    assert np.array_equal(band, full[16:32])


def test_camera_rays_rejects_empty():
    with pytest.raises(ValueError):
        camera_rays(0, 4, 1.0)


def test_render_flat_mirror(grey_frame):
    result = render_frame(grey_frame, RenderContext(scene=FLAT_SCENE), 32, 24)
    assert result.image.shape == (24, 32, 4)
    assert result.image.dtype == np.uint8
    assert 0.0 < result.hit_fraction <= 1.0
    centre = result.image[12, 16, :3].astype(int)
    assert np.all(np.abs(centre - round(128 * FLAT_SCENE.reflectivity)) <= 2)


def test_tiles_match_single_pass(grey_frame):
    scene = SceneConfig(tile_rows=5, workers=3)
    ctx = RenderContext(scene=scene)
    tiled = render_frame(grey_frame, ctx, 20, 17)
    single = render_frame(grey_frame, ctx, 20, 17, workers=1)
    assert np.array_equal(tiled.image, single.image)
    assert tiled.hit_fraction == single.hit_fraction


def test_render_revolution(grey_frame):
    scene = SceneConfig(family=ProfileFamily.REVOLUTION, mirror_radius=1.0)
    ctx = RenderContext(scene=scene, revolution=RevolutionProfile(a2=0.1, a1=-0.2))
    result = render_frame(grey_frame, ctx, 24, 24)
    # Corners fall outside the circular mirror.
    assert result.image[0, 0].tolist() == [255, 255, 255, 255]
    assert 0.0 < result.hit_fraction < 1.0


def test_cross_section_fan():
    scene = SceneConfig(family=ProfileFamily.REVOLUTION)
    section = cross_section(RevolutionProfile(a1=-0.3), scene, samples=50, rays=5)
    assert len(section.profile) == 50
    assert len(section.rays) == 5
    middle = section.rays[2]
    assert middle.angle == 0.0
    assert middle.hit == pytest.approx((2.0, 0.0))
    assert middle.landing == pytest.approx((-0.5, 0.0))
    assert not middle.missed and not middle.behind


def test_cross_section_marks_misses():
    scene = SceneConfig(family=ProfileFamily.REVOLUTION, mirror_radius=0.2)
    section = cross_section(RevolutionProfile(), scene, rays=3)
    assert section.rays[0].missed and section.rays[-1].missed
    assert not section.rays[1].missed
