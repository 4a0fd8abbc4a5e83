"""POST /api/render — ray-trace one webcam frame through the mirror."""

from __future__ import annotations

import asyncio
import base64
import binascii
import io
import logging

import numpy as np
from fastapi import APIRouter, Depends, HTTPException
from PIL import Image, UnidentifiedImageError

from funhouse.api.profile import anchor_points, build_pipeline
from funhouse.config import settings
from funhouse.dependencies import get_publisher
from funhouse.engine.config import ProfileFamily
from funhouse.engine.context import RenderContext
from funhouse.engine.pipeline import ProfilePublisher
from funhouse.models.requests import RenderRequest
from funhouse.models.responses import RenderResponse
from funhouse.optics.renderer import render_frame

logger = logging.getLogger(__name__)

router = APIRouter()


def decode_frame(data: str, max_pixels: int | None = None) -> np.ndarray:
    """Base64 image (optionally a data: URL) → (H, W, 4) uint8 RGBA.

    Frames over ``max_pixels`` are refused before their pixels are decoded.
    """
    if data.startswith("data:"):
        data = data.split(",", 1)[-1]
    try:
        raw = base64.b64decode(data, validate=True)
        with Image.open(io.BytesIO(raw)) as img:
            width, height = img.size
            if max_pixels is not None and width * height > max_pixels:
                raise HTTPException(
                    status_code=422,
                    detail=f"Frame is {width}x{height}, over the {max_pixels} pixel limit",
                )
            return np.asarray(img.convert("RGBA"), dtype=np.uint8)
    except (binascii.Error, UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise HTTPException(status_code=422, detail=f"Could not decode frame: {e}") from e


def encode_png(image: np.ndarray) -> str:
    buf = io.BytesIO()
    Image.fromarray(image).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


@router.post("/render", response_model=RenderResponse)
async def render(
    req: RenderRequest,
    publisher: ProfilePublisher = Depends(get_publisher),
) -> RenderResponse:
    if req.width * req.height > settings.max_render_pixels:
        raise HTTPException(status_code=422, detail="Requested output is too large")
    frame = decode_frame(req.frame_png, settings.max_render_pixels)

    scene = req.scene.to_config(workers=settings.render_workers, tile_rows=settings.render_tile_rows)
    version = None
    if req.segments is not None:
        segments = tuple(s.to_segment() for s in req.segments)
    elif req.anchors is not None:
        pipeline = build_pipeline(
            req.strategy, req.tolerance, req.bounds, half_height=scene.mirror_half_height
        )
        segments = pipeline.run(anchor_points(pipeline, req.anchors)).segments
    elif scene.family is ProfileFamily.EXTRUDED:
        segments = publisher.snapshot().segments
        version = publisher.version
    else:
        segments = ()
    ctx = RenderContext(scene=scene, segments=segments, revolution=req.revolution.to_profile())

    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, render_frame, frame, ctx, req.width, req.height)

    logger.info(
        "Render %dx%d from %dx%d frame: %.0f%% hits in %.0fms",
        req.width,
        req.height,
        frame.shape[1],
        frame.shape[0],
        result.hit_fraction * 100,
        result.elapsed_ms,
    )
    return RenderResponse(
        image_png=encode_png(result.image),
        width=req.width,
        height=req.height,
        hit_fraction=round(result.hit_fraction, 4),
        elapsed_ms=round(result.elapsed_ms, 1),
        profile_version=version,
    )
