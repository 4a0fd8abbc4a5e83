"""Bilinear, clamp-to-edge texture lookup into a webcam frame."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


class FrameSampler:
    """Wraps an (H, W, 3|4) uint8 or float frame; call with (N, 2) UV → (N, 4) RGBA floats.

    UV (0, 0) is the top-left of the frame and texel centres sit at
    ((j + 0.5)/W, (i + 0.5)/H).
    """

    def __init__(self, frame: NDArray) -> None:
        frame = np.asarray(frame)
        if frame.ndim != 3 or frame.shape[2] not in (3, 4):
            raise ValueError(f"Expected an (H, W, 3|4) frame, got shape {frame.shape}")
        if frame.shape[0] == 0 or frame.shape[1] == 0:
            raise ValueError("Frame has no pixels")

        data = frame.astype(np.float64)
        if np.issubdtype(frame.dtype, np.integer):
            data /= 255.0
        if data.shape[2] == 3:
            data = np.concatenate([data, np.ones(data.shape[:2] + (1,))], axis=2)
        self.texels = data
        self.height, self.width = data.shape[:2]

    def __call__(self, uv: NDArray[np.float64]) -> NDArray[np.float64]:
        uv = np.atleast_2d(uv)
        fx = uv[:, 0] * self.width - 0.5
        fy = uv[:, 1] * self.height - 0.5

        x0 = np.floor(fx)
        y0 = np.floor(fy)
        wx = (fx - x0)[:, None]
        wy = (fy - y0)[:, None]

        x0 = x0.astype(np.int64)
        y0 = y0.astype(np.int64)
        xa = np.clip(x0, 0, self.width - 1)
        xb = np.clip(x0 + 1, 0, self.width - 1)
        ya = np.clip(y0, 0, self.height - 1)
        yb = np.clip(y0 + 1, 0, self.height - 1)

        t = self.texels
        top = t[ya, xa] * (1.0 - wx) + t[ya, xb] * wx
        bottom = t[yb, xa] * (1.0 - wx) + t[yb, xb] * wx
        return top * (1.0 - wy) + bottom * wy
