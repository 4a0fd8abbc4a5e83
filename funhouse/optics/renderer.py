"""Frame renderer — camera rays → intersection → shading, tiled across threads."""

from __future__ import annotations

import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from funhouse.engine.context import RenderContext
from funhouse.optics.intersection import intersect
from funhouse.optics.sampler import FrameSampler
from funhouse.optics.shading import shade

logger = logging.getLogger(__name__)

CAMERA_ORIGIN = np.zeros(3)


@dataclass
class RenderResult:
    image: NDArray[np.uint8]
    hit_fraction: float
    elapsed_ms: float


def camera_rays(width: int, height: int, fov: float, rows: slice | None = None) -> NDArray[np.float64]:
    """Unit directions through pixel centres, row-major, for the given row range.

    Pinhole at the origin looking down +z; ``fov`` is vertical.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Output size must be positive, got {width}x{height}")
    rows = rows or slice(0, height)
    aspect = width / height
    half = math.tan(fov / 2.0)

    i = np.arange(rows.start, rows.stop, dtype=np.float64)
    j = np.arange(width, dtype=np.float64)
    x = (2.0 * (j + 0.5) / width - 1.0) * aspect * half
    y = (1.0 - 2.0 * (i + 0.5) / height) * half
    xx, yy = np.meshgrid(x, y)
    d = np.stack([xx.ravel(), yy.ravel(), np.ones(xx.size)], axis=-1)
    return d / np.linalg.norm(d, axis=-1, keepdims=True)


def render_tile(
    ctx: RenderContext,
    sampler: FrameSampler,
    width: int,
    height: int,
    rows: slice,
) -> tuple[NDArray[np.float64], int]:
    """Shade one band of rows. Returns (RGBA floats, number of mirror hits)."""
    directions = camera_rays(width, height, ctx.scene.fov, rows)
    hits = intersect(ctx, CAMERA_ORIGIN, directions)
    colors = shade(hits, directions, ctx, sampler)
    return colors.reshape(rows.stop - rows.start, width, 4), int(np.count_nonzero(hits.mask))


def render_frame(
    frame: NDArray,
    ctx: RenderContext,
    width: int,
    height: int,
    workers: int | None = None,
) -> RenderResult:
    """Render the mirror view of ``frame`` at ``width`` x ``height``.

    Each tile writes a disjoint band of the output; the context and
    sampler are shared read-only.
    """
    start = time.perf_counter()
    sampler = FrameSampler(frame)
    scene = ctx.scene
    workers = workers or scene.workers
    tile = max(1, scene.tile_rows)

    out = np.empty((height, width, 4), dtype=np.float64)
    bands = [slice(r, min(r + tile, height)) for r in range(0, height, tile)]

    def _run(rows: slice) -> int:
        colors, hits = render_tile(ctx, sampler, width, height, rows)
        out[rows] = colors
        return hits

    if workers > 1 and len(bands) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            hit_count = sum(pool.map(_run, bands))
    else:
        hit_count = sum(_run(rows) for rows in bands)

    image = np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)
    elapsed = (time.perf_counter() - start) * 1000
    fraction = hit_count / float(width * height)
    logger.debug(
        "Rendered %dx%d %s frame in %.1fms (%d tiles, %.0f%% hits)",
        width,
        height,
        ctx.family.value,
        elapsed,
        len(bands),
        fraction * 100,
    )
    return RenderResult(image=image, hit_fraction=fraction, elapsed_ms=elapsed)
