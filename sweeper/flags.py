from __future__ import annotations

from typing import List, Sequence, Tuple


def toggle_flag(idx: int, revealed: Sequence[bool], flagged: Sequence[bool], mines_left: int) -> Tuple[List[bool], int, bool]:
    """Flip the flag on a hidden cell.

    Returns ``(flagged', mines_left', changed)``. Revealed cells are never
    flagged, and a new flag is refused once the counter reaches zero.
    """
    flags = list(flagged)
    if revealed[idx]:
        return flags, mines_left, False
    if flags[idx]:
        flags[idx] = False
        return flags, mines_left + 1, True
    if mines_left <= 0:
        return flags, mines_left, False
    flags[idx] = True
    return flags, mines_left - 1, True
