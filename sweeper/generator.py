from __future__ import annotations

import random
from typing import Iterable, Optional, Tuple

from .config import MINE
from .grid import BoardConfig, coords, index, neighbors, zone


def adjacency_counts(mines: set[int], rows: int, cols: int) -> Tuple[int, ...]:
    values = [0] * (rows * cols)
    for i in range(rows * cols):
        if i in mines:
            values[i] = MINE
            continue
        r, c = coords(i, cols)
        cnt = 0
        for nr, nc in neighbors(r, c, rows, cols):
            if index(nr, nc, cols) in mines:
                cnt += 1
        values[i] = cnt
    return tuple(values)


def generate(
    board: BoardConfig,
    safe_row: int,
    safe_col: int,
    rng: Optional[random.Random] = None,
    excluded: Optional[Iterable[int]] = None,
) -> Tuple[int, ...]:
    """Lay out ``board.mine_count`` mines, none inside the safety zone.

    The safety zone defaults to the clipped 3x3 block around the first click.
    Returns the flat cell values: ``MINE`` or the 8-neighbor mine count.
    """
    rows, cols = board.rows, board.cols
    ex = set(excluded) if excluded is not None else zone(safe_row, safe_col, rows, cols)
    available = [i for i in range(board.size) if i not in ex]
    if board.mine_count > len(available):
        raise ValueError("insufficient_space_for_mines")
    rng = rng or random.Random()
    mines = set(rng.sample(available, board.mine_count))
    return adjacency_counts(mines, rows, cols)


def from_mines(board: BoardConfig, mines: Iterable[Tuple[int, int]]) -> Tuple[int, ...]:
    """Build cell values from an explicit mine list (fixed layouts)."""
    mines = list(mines)
    if any(not board.contains(r, c) for r, c in mines):
        raise ValueError("out_of_bounds")
    cells = {index(r, c, board.cols) for r, c in mines}
    if len(cells) != board.mine_count:
        raise ValueError("invalid_mine_count")
    return adjacency_counts(cells, board.rows, board.cols)
