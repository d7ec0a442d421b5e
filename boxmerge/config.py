"""
Configuration - Environment-driven engine settings.

    BOXMERGE_GRID_SIZE           default board size (6)
    BOXMERGE_WIN_VALUE           block value that wins (2048)
    BOXMERGE_ANIMATION_TIMEOUT   seconds before a stalled wait is expired (unset = never)
    ALLOWED_ORIGINS              comma-separated CORS origins for the API ("*")
"""

from __future__ import annotations
from dataclasses import dataclass
import os


DEFAULT_GRID_SIZE = 6
MIN_GRID_SIZE = 2


@dataclass(frozen=True)
class EngineConfig:
    grid_size: int = DEFAULT_GRID_SIZE
    win_value: int = 2048
    animation_timeout: float | None = None
    allowed_origins: tuple[str, ...] = ("*",)

    def __post_init__(self):
        if self.grid_size < MIN_GRID_SIZE:
            raise ValueError(f"grid_size must be at least {MIN_GRID_SIZE}, got {self.grid_size}")
        if self.win_value < 2:
            raise ValueError(f"win_value must be at least 2, got {self.win_value}")

    @classmethod
    def from_env(cls) -> EngineConfig:
        timeout = os.getenv("BOXMERGE_ANIMATION_TIMEOUT")
        return cls(
            grid_size=int(os.getenv("BOXMERGE_GRID_SIZE", DEFAULT_GRID_SIZE)),
            win_value=int(os.getenv("BOXMERGE_WIN_VALUE", 2048)),
            animation_timeout=float(timeout) if timeout else None,
            allowed_origins=tuple(os.getenv("ALLOWED_ORIGINS", "*").split(",")),
        )
