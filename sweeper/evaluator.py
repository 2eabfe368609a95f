from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, List, Optional, Sequence

from .config import (
    CHORD_PREVIEW,
    EXPLODED,
    FLAGGED,
    MINE,
    REVEALED_ZERO,
    UNEXPLODED_MINE,
    UNOPENED,
    WRONG_FLAG,
)
from .grid import BoardConfig, Phase


class WinKind(str, Enum):
    REVEALED = "revealed"
    FLAGS = "flags"
    UNOPENED = "unopened"


@dataclass(frozen=True)
class Tally:
    revealed_safe: int
    correct_flags: int
    wrong_flags: int
    unopened: int


def tally(revealed: Sequence[bool], flagged: Sequence[bool], values: Sequence[int]) -> Tally:
    revealed_safe = correct = wrong = unopened = 0
    for i, v in enumerate(values):
        is_mine = v == MINE
        if revealed[i] and not is_mine:
            revealed_safe += 1
        if flagged[i]:
            if is_mine:
                correct += 1
            else:
                wrong += 1
        if not revealed[i] and not flagged[i]:
            unopened += 1
    return Tally(revealed_safe, correct, wrong, unopened)


def check_win(
    board: BoardConfig,
    revealed: Sequence[bool],
    flagged: Sequence[bool],
    values: Sequence[int],
    mines_left: int,
    loose: bool = True,
) -> Optional[WinKind]:
    """First win predicate that holds, in priority order, or None.

    ``WinKind.UNOPENED`` (hidden cells equal the flag budget) can fire while
    wrong flags are still on the board; ``loose=False`` disables it.
    """
    t = tally(revealed, flagged, values)
    if t.revealed_safe == board.safe_cells:
        return WinKind.REVEALED
    if mines_left == 0 and t.correct_flags == board.mine_count and t.wrong_flags == 0:
        return WinKind.FLAGS
    if loose and t.unopened == mines_left:
        return WinKind.UNOPENED
    return None


def _base_code(value: int, revealed: bool, flagged: bool) -> str:
    if revealed:
        return REVEALED_ZERO if value == 0 else str(value)
    if flagged:
        return FLAGGED
    return UNOPENED


def project(
    values: Sequence[int],
    revealed: Sequence[bool],
    flagged: Sequence[bool],
    phase: Phase,
    exploded: Optional[int] = None,
    win_kind: Optional[WinKind] = None,
    preview: AbstractSet[int] = frozenset(),
) -> List[str]:
    """Display code for every cell, derived from the board and phase."""
    out: List[str] = []
    for i, v in enumerate(values):
        code = _base_code(v, revealed[i], flagged[i])
        is_mine = v == MINE
        if phase == Phase.LOST:
            if i == exploded:
                code = EXPLODED
            elif flagged[i] and not is_mine:
                code = WRONG_FLAG
            elif not flagged[i] and is_mine:
                code = UNEXPLODED_MINE
        elif phase == Phase.WON:
            if win_kind in (WinKind.REVEALED, WinKind.FLAGS) and is_mine and not flagged[i]:
                code = FLAGGED
        elif i in preview and code == UNOPENED:
            code = CHORD_PREVIEW
        out.append(code)
    return out
