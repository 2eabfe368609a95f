from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Tuple


MINE = 99
MAX_TIME = 999

UNOPENED = "0"
FLAGGED = "F"
EXPLODED = "E"
WRONG_FLAG = "X"
UNEXPLODED_MINE = "M"
CHORD_PREVIEW = "D"
REVEALED_ZERO = "Z"

# 3 mines on the classic 16x30 board
BASE_MINE_DENSITY = 3 / (16 * 30)


@dataclass(frozen=True)
class BoardPreset:
    id: str
    rows: int
    cols: int
    min_width: int


DEFAULT_PRESETS: Tuple[BoardPreset, ...] = (
    BoardPreset("mobile-xs", 9, 9, 0),
    BoardPreset("mobile-s", 10, 16, 480),
    BoardPreset("tablet", 12, 20, 768),
    BoardPreset("desktop-s", 12, 30, 1024),
    BoardPreset("desktop-m", 14, 30, 1440),
    BoardPreset("desktop-l", 16, 30, 1920),
)


@dataclass(frozen=True)
class GameSettings:
    max_time: int = MAX_TIME
    tick_interval: float = 1.0
    mine_density: float = BASE_MINE_DENSITY
    presets: Tuple[BoardPreset, ...] = field(default=DEFAULT_PRESETS)
    loose_win_check: bool = True

    def with_overrides(self, **kwargs) -> "GameSettings":
        clean = {k: v for k, v in kwargs.items() if v is not None}
        return replace(self, **clean)


DEFAULT_SETTINGS = GameSettings()


def mines_for(rows: int, cols: int, density: float = BASE_MINE_DENSITY) -> int:
    # halves round up
    return max(1, int(math.floor(density * rows * cols + 0.5)))


def choose_preset(viewport_width: int, settings: GameSettings = DEFAULT_SETTINGS) -> BoardPreset:
    """Largest preset whose minimum width the viewport meets."""
    if not settings.presets:
        raise ValueError("unknown_preset")
    chosen = None
    for p in sorted(settings.presets, key=lambda p: p.min_width):
        if viewport_width >= p.min_width:
            chosen = p
    if chosen is None:
        raise ValueError("unknown_preset")
    return chosen


def choose_board(viewport_width: int, settings: GameSettings = DEFAULT_SETTINGS) -> Tuple[BoardPreset, int]:
    preset = choose_preset(viewport_width, settings)
    return preset, mines_for(preset.rows, preset.cols, settings.mine_density)
