from __future__ import annotations

from collections import deque
from typing import List, Optional, Sequence, Tuple

from .config import MINE
from .grid import index, neighbor_indices


def flood_reveal(
    origin: int,
    revealed: Sequence[bool],
    flagged: Sequence[bool],
    values: Sequence[int],
    rows: int,
    cols: int,
) -> Tuple[List[bool], List[int]]:
    """Reveal ``origin`` and spread through connected zero cells.

    Works on a copy of ``revealed``; returns it together with the indices
    opened by this call, in visiting order. Flagged cells stop the spread.
    A mine at ``origin`` must be handled by the caller as a loss.
    """
    if values[origin] == MINE and not revealed[origin] and not flagged[origin]:
        raise ValueError("mine_cell")
    rev = list(revealed)
    opened: List[int] = []
    seen = {origin}
    q = deque([origin])
    while q:
        i = q.popleft()
        if rev[i] or flagged[i]:
            continue
        rev[i] = True
        opened.append(i)
        if values[i] == 0:
            for j in neighbor_indices(i, rows, cols):
                if j not in seen and not rev[j] and not flagged[j]:
                    seen.add(j)
                    q.append(j)
    return rev, opened


def flagged_around(idx: int, flagged: Sequence[bool], rows: int, cols: int) -> int:
    return sum(1 for j in neighbor_indices(idx, rows, cols) if flagged[j])


def hidden_around(idx: int, revealed: Sequence[bool], flagged: Sequence[bool], rows: int, cols: int) -> List[int]:
    return [j for j in neighbor_indices(idx, rows, cols) if not revealed[j] and not flagged[j]]


def is_numbered(idx: int, revealed: Sequence[bool], values: Sequence[int]) -> bool:
    return revealed[idx] and 0 < values[idx] < MINE


def chord_targets(
    idx: int,
    revealed: Sequence[bool],
    flagged: Sequence[bool],
    values: Sequence[int],
    rows: int,
    cols: int,
) -> Optional[List[int]]:
    """Neighbors a chord on ``idx`` would open, or None when it is not satisfied."""
    if not is_numbered(idx, revealed, values):
        return None
    if flagged_around(idx, flagged, rows, cols) != values[idx]:
        return None
    return hidden_around(idx, revealed, flagged, rows, cols)


def chord_reveal(
    idx: int,
    revealed: Sequence[bool],
    flagged: Sequence[bool],
    values: Sequence[int],
    rows: int,
    cols: int,
) -> Tuple[List[bool], List[int], Optional[int]]:
    """Open every target of a satisfied chord.

    Returns ``(revealed', opened, mine)``. When a target holds a mine the walk
    stops there, ``mine`` is its index and ``revealed'`` is the input
    unchanged, so nothing opened earlier in the chord is kept.
    """
    targets = chord_targets(idx, revealed, flagged, values, rows, cols)
    if not targets:
        return list(revealed), [], None
    rev = list(revealed)
    opened: List[int] = []
    for j in targets:
        if rev[j]:
            continue
        if values[j] == MINE:
            return list(revealed), [], j
        rev, more = flood_reveal(j, rev, flagged, values, rows, cols)
        opened.extend(more)
    return rev, opened, None


def chord_preview(
    row: int,
    col: int,
    revealed: Sequence[bool],
    flagged: Sequence[bool],
    values: Sequence[int],
    rows: int,
    cols: int,
) -> set[int]:
    """Hidden, unflagged neighbors highlighted while both buttons are held."""
    idx = index(row, col, cols)
    if not is_numbered(idx, revealed, values):
        return set()
    return set(hidden_around(idx, revealed, flagged, rows, cols))
