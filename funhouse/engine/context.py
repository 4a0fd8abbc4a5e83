"""RenderContext — everything one frame needs, passed explicitly into the renderer.

Immutable: a new design produces a new context. The packed segment buffer
is derived once per context and shared read-only by all tiles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property

import numpy as np
from numpy.typing import NDArray

from funhouse.engine.config import ProfileFamily, SceneConfig
from funhouse.geometry.polynomial import (
    MAX_SEGMENTS,
    ProfileSegment,
    RevolutionProfile,
    flat_profile,
    pack_segments,
)


@dataclass(frozen=True)
class RenderContext:
    scene: SceneConfig = field(default_factory=SceneConfig)
    segments: tuple[ProfileSegment, ...] = ()
    revolution: RevolutionProfile = field(default_factory=RevolutionProfile)

    def __post_init__(self) -> None:
        if not self.segments:
            object.__setattr__(self, "segments", flat_profile(self.scene.mirror_half_height))

    @cached_property
    def packed_segments(self) -> NDArray[np.float64]:
        packed = pack_segments(self.segments, MAX_SEGMENTS)
        packed.flags.writeable = False
        return packed

    @property
    def family(self) -> ProfileFamily:
        return self.scene.family
