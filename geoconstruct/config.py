"""Configuration helpers for engine components."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class EngineConfig:
    """Numeric knobs shared by the solver and the spatial index."""

    # absolute tolerance for every comparison against zero
    tolerance: float = 1e-9
    # edge length of a spatial hash tile in actual (pixel) units
    tile_size: float = 40.0
    # inward nudge applied to clipped segment ends before rasterising
    clip_nudge: float = 1e-6

    def __post_init__(self) -> None:
        if self.tolerance < 0.0:
            raise ValueError("tolerance must be non-negative")
        if self.tile_size <= 0.0:
            raise ValueError("tile_size must be positive")
        if self.clip_nudge < 0.0:
            raise ValueError("clip_nudge must be non-negative")


_ENGINE_CONFIG = EngineConfig()


def get_engine_config() -> EngineConfig:
    return copy.deepcopy(_ENGINE_CONFIG)


def set_engine_config(config: EngineConfig) -> None:
    global _ENGINE_CONFIG
    _ENGINE_CONFIG = copy.deepcopy(config)
