"""Tests for API endpoints."""

from __future__ import annotations

import base64
import io

import numpy as np
import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from PIL import Image

from funhouse.api.render import decode_frame
from funhouse.main import app


client = TestClient(app)

CANVAS_BOUNDS = {"x": 400, "y_top": 50, "y_bottom": 550}


def _png_b64(width: int = 16, height: int = 12) -> str:
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    arr[: height // 2] = (200, 40, 40)
    arr[height // 2 :] = (40, 40, 200)
    buf = io.BytesIO()
    Image.fromarray(arr).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


def _decode(b64: str) -> Image.Image:
    return Image.open(io.BytesIO(base64.b64decode(b64)))


def test_health():
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert sorted(data["strategies"]) == ["hybrid", "point_passthrough", "spring_spline"]


def test_profile_canvas_anchors():
    response = client.post("/api/profile", json={
        "anchors": [{"x": 480, "y": 400}, {"x": 300, "y": 200}],
        "strategy": "spring_spline",
        "tolerance": 0.5,
        "bounds": CANVAS_BOUNDS,
        "publish": False,
    })
    assert response.status_code == 200
    data = response.json()
    segs = data["segments"]
    assert segs[0]["y_min"] == -2.0 and segs[-1]["y_max"] == 2.0
    for left, right in zip(segs, segs[1:]):
        assert left["y_max"] == right["y_min"]
    assert data["svg_path"].startswith("M 400 50 Q")
    assert data["quadratics"][0]["start"] == {"x": 400.0, "y": 50.0}
    assert data["stats"]["original_segments"] == 3
    assert len(data["seams"]) == len(segs) - 1
    assert "<svg" in data["svg"]
    assert data["truncated"] is False


def test_profile_places_anchors_with_ids():
    response = client.post("/api/profile", json={
        "anchors": [{"x": 480, "y": 400}, {"x": 300, "y": 200}],
        "bounds": CANVAS_BOUNDS,
        "legacy_lines": True,
        "publish": False,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["anchors"] == [
        {"x": 300.0, "y": 200.0, "id": 1},
        {"x": 480.0, "y": 400.0, "id": 0},
    ]
    assert data["max_slope_jump"] < 1e-6
    assert data["tolerance"] == 1.0
    assert data["deviation"] < 0.1
    assert data["preview"][0] == {"x": 400.0, "y": 50.0}
    assert len(data["line_segments"]) == 16


def test_profile_rejects_misplaced_anchor():
    response = client.post("/api/profile", json={
        "anchors": [{"x": 300, "y": 200}, {"x": 410, "y": 300}],
        "bounds": CANVAS_BOUNDS,
        "publish": False,
    })
    assert response.status_code == 422
    assert "dead zone" in response.json()["detail"]

    response = client.post("/api/profile", json={
        "anchors": [{"x": 300, "y": 200}, {"x": 320, "y": 220}],
        "bounds": CANVAS_BOUNDS,
    })
    assert response.status_code == 422
    assert "vertically" in response.json()["detail"]


def test_profile_physical_single_anchor():
    response = client.post("/api/profile", json={
        "anchors": [{"x": -0.5, "y": 0.0}],
        "strategy": "point_passthrough",
        "half_height": 1.0,
        "publish": False,
    })
    assert response.status_code == 200
    (seg,) = response.json()["segments"]
    assert abs(seg["c"] - (-0.5)) < 1e-9
    assert abs(seg["a"] - 0.5) < 1e-9


def test_profile_rejects_bad_tolerance():
    response = client.post("/api/profile", json={"anchors": [], "tolerance": 0})
    assert response.status_code == 422


def test_render_round_trip():
    response = client.post("/api/render", json={
        "frame_png": _png_b64(),
        "width": 20,
        "height": 15,
        "segments": [{"a": 0.0, "b": 0.0, "c": 0.0, "y_min": -2.0, "y_max": 2.0}],
    })
    assert response.status_code == 200
    data = response.json()
    img = _decode(data["image_png"])
    assert img.size == (20, 15)
    assert img.mode == "RGBA"
    assert 0.0 < data["hit_fraction"] <= 1.0
    assert data["elapsed_ms"] >= 0.0


def test_render_uses_published_profile():
    published = client.post("/api/profile", json={
        "anchors": [{"x": 300, "y": 300}],
        "bounds": CANVAS_BOUNDS,
    })
    version = published.json()["version"]
    response = client.post("/api/render", json={"frame_png": _png_b64(), "width": 8, "height": 6})
    assert response.status_code == 200
    assert response.json()["profile_version"] == version


def test_render_from_anchors_and_revolution():
    response = client.post("/api/render", json={
        "frame_png": "data:image/png;base64," + _png_b64(),
        "width": 12,
        "height": 12,
        "anchors": [{"x": 300, "y": 300}],
        "bounds": CANVAS_BOUNDS,
    })
    assert response.status_code == 200

    response = client.post("/api/render", json={
        "frame_png": _png_b64(),
        "width": 12,
        "height": 12,
        "scene": {"family": "revolution", "mirror_radius": 1.0},
        "revolution": {"a2": 0.05, "a1": -0.2},
    })
    assert response.status_code == 200
    assert response.json()["hit_fraction"] < 1.0


def test_render_bad_frame():
    response = client.post("/api/render", json={"frame_png": "not base64!!"})
    assert response.status_code == 422
    response = client.post("/api/render", json={"frame_png": base64.b64encode(b"nope").decode()})
    assert response.status_code == 422


def test_diagram():
    response = client.post("/api/diagram", json={"revolution": {"a1": -0.3}, "rays": 5})
    assert response.status_code == 200
    data = response.json()
    assert len(data["rays"]) == 5
    assert data["rays"][2]["hit"] == [2.0, 0.0]
    assert data["image_plane"] == -0.5
    assert "<svg" in data["svg"]


def test_decode_frame_refuses_oversized_frame():
    with pytest.raises(HTTPException) as exc:
        decode_frame(_png_b64(16, 12), max_pixels=100)
    assert exc.value.status_code == 422
    assert decode_frame(_png_b64(16, 12), max_pixels=192).shape == (12, 16, 4)


def test_render_decompression_bomb_is_422(monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
    response = client.post("/api/render", json={"frame_png": _png_b64(), "width": 8, "height": 6})
    assert response.status_code == 422
