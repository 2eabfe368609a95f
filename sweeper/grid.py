from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Sequence, Tuple, TypeVar

T = TypeVar("T")


class Phase(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"

    @property
    def terminal(self) -> bool:
        return self in (Phase.WON, Phase.LOST)


@dataclass(frozen=True)
class BoardConfig:
    rows: int
    cols: int
    mine_count: int

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError("invalid_dimensions")
        if not (0 < self.mine_count < self.rows * self.cols):
            raise ValueError("invalid_mine_count")

    @property
    def size(self) -> int:
        return self.rows * self.cols

    @property
    def safe_cells(self) -> int:
        return self.size - self.mine_count

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols


def index(row: int, col: int, cols: int) -> int:
    return row * cols + col


def coords(idx: int, cols: int) -> Tuple[int, int]:
    return divmod(idx, cols)


def neighbors(r: int, c: int, rows: int, cols: int) -> Iterator[Tuple[int, int]]:
    for nr in range(max(0, r - 1), min(rows, r + 2)):
        for nc in range(max(0, c - 1), min(cols, c + 2)):
            if nr == r and nc == c:
                continue
            yield nr, nc


def neighbor_indices(idx: int, rows: int, cols: int) -> Iterator[int]:
    r, c = coords(idx, cols)
    for nr, nc in neighbors(r, c, rows, cols):
        yield index(nr, nc, cols)


def zone(r: int, c: int, rows: int, cols: int) -> set[int]:
    """The 3x3 block around (r, c), clipped to the board."""
    out = {index(r, c, cols)}
    for nr, nc in neighbors(r, c, rows, cols):
        out.add(index(nr, nc, cols))
    return out


def to_rows(flat: Sequence[T], cols: int) -> List[List[T]]:
    return [list(flat[i:i + cols]) for i in range(0, len(flat), cols)]
