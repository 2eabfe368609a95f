from __future__ import annotations

import logging
import random
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .config import DEFAULT_SETTINGS, MINE, BoardPreset, GameSettings, choose_board
from .evaluator import WinKind, check_win, project
from .flags import toggle_flag
from .generator import from_mines, generate
from .grid import BoardConfig, Phase, index, to_rows, zone
from .input import Button, Click, InputClassifier
from .reveal import chord_preview, chord_reveal, flood_reveal
from .timer import SessionTimer

logger = logging.getLogger(__name__)


class GameSession:
    """One game: owns every grid, the counters, the clock and the input state.

    All mutation goes through the ``handle_*`` methods, ``press``/``release``,
    ``set_foreground``, ``tick`` and ``reset``. Each call returns a result dict
    describing what changed. Actions after a win or loss are ignored.
    """

    def __init__(
        self,
        board: BoardConfig,
        settings: GameSettings = DEFAULT_SETTINGS,
        rng_seed: Optional[int] = None,
        mines: Optional[Iterable[Tuple[int, int]]] = None,
        preset: Optional[BoardPreset] = None,
    ) -> None:
        self.board = board
        self.settings = settings
        self.preset = preset
        self.rng_seed = rng_seed
        self._rng = random.Random(rng_seed)
        self._layout = from_mines(board, mines) if mines is not None else None
        self.foreground = True
        self.timer = SessionTimer(settings.max_time, settings.tick_interval, on_expire=self._expire)
        self._fresh()

    @classmethod
    def new_session(
        cls,
        rows: int,
        cols: int,
        mine_count: int,
        settings: GameSettings = DEFAULT_SETTINGS,
        rng_seed: Optional[int] = None,
    ) -> "GameSession":
        return cls(BoardConfig(rows, cols, mine_count), settings, rng_seed=rng_seed)

    @classmethod
    def for_viewport(
        cls,
        viewport_width: int,
        settings: GameSettings = DEFAULT_SETTINGS,
        rng_seed: Optional[int] = None,
    ) -> "GameSession":
        preset, mine_count = choose_board(viewport_width, settings)
        board = BoardConfig(preset.rows, preset.cols, mine_count)
        return cls(board, settings, rng_seed=rng_seed, preset=preset)

    def _fresh(self) -> None:
        n = self.board.size
        self._values: Tuple[int, ...] = (0,) * n
        self._revealed: List[bool] = [False] * n
        self._flagged: List[bool] = [False] * n
        self.phase = Phase.NOT_STARTED
        self.mines_left = self.board.mine_count
        self.moves_count = 0
        self.exploded: Optional[int] = None
        self.win_kind: Optional[WinKind] = None
        self.loss_cause: Optional[str] = None
        self._preview: frozenset[int] = frozenset()
        self.input = InputClassifier()

    # read-only views

    @property
    def values(self) -> Tuple[int, ...]:
        return self._values

    @property
    def revealed(self) -> Tuple[bool, ...]:
        return tuple(self._revealed)

    @property
    def flagged(self) -> Tuple[bool, ...]:
        return tuple(self._flagged)

    @property
    def elapsed(self) -> int:
        return self.timer.elapsed

    @property
    def display(self) -> List[str]:
        return project(
            self._values,
            self._revealed,
            self._flagged,
            self.phase,
            exploded=self.exploded,
            win_kind=self.win_kind,
            preview=self._preview,
        )

    def display_grid(self) -> List[List[str]]:
        return to_rows(self.display, self.board.cols)

    # player actions

    def handle_primary_click(self, row: int, col: int) -> Dict[str, Any]:
        if self.phase.terminal or not self.board.contains(row, col):
            return self._result()
        i = index(row, col, self.board.cols)
        if self._flagged[i] or self._revealed[i]:
            return self._result()
        if self.phase == Phase.NOT_STARTED:
            self._start(row, col)
        self.moves_count += 1
        if self._values[i] == MINE:
            self._lose(i, "mine")
            return self._result(hit_mine=True)
        self._revealed, opened = flood_reveal(
            i, self._revealed, self._flagged, self._values, self.board.rows, self.board.cols
        )
        self._evaluate()
        return self._result(cleared=len(opened))

    def handle_secondary_click(self, row: int, col: int) -> Dict[str, Any]:
        if self.phase.terminal or not self.board.contains(row, col):
            return self._result()
        i = index(row, col, self.board.cols)
        self._flagged, self.mines_left, changed = toggle_flag(i, self._revealed, self._flagged, self.mines_left)
        if changed:
            self.moves_count += 1
        self._evaluate()
        return self._result()

    def handle_chord_click(self, row: int, col: int) -> Dict[str, Any]:
        if self.phase != Phase.IN_PROGRESS or not self.board.contains(row, col):
            return self._result()
        i = index(row, col, self.board.cols)
        rev, opened, mine = chord_reveal(
            i, self._revealed, self._flagged, self._values, self.board.rows, self.board.cols
        )
        if mine is not None:
            self.moves_count += 1
            self._lose(mine, "mine")
            return self._result(hit_mine=True)
        if opened:
            self.moves_count += 1
            self._revealed = rev
        self._evaluate()
        return self._result(cleared=len(opened))

    def press(self, button: Button, row: int, col: int) -> Dict[str, Any]:
        if self.phase.terminal:
            return self._result()
        both = self.input.press(button)
        if both and self.phase == Phase.IN_PROGRESS and self.board.contains(row, col):
            self._preview = frozenset(
                chord_preview(row, col, self._revealed, self._flagged, self._values, self.board.rows, self.board.cols)
            )
        return self._result()

    def release(self, row: int, col: int) -> Dict[str, Any]:
        self._preview = frozenset()
        if self.phase.terminal:
            self.input.clear()
            return self._result()
        kind = self.input.release()
        return self.dispatch(kind, row, col)

    def dispatch(self, kind: Click, row: int, col: int) -> Dict[str, Any]:
        if kind == Click.CHORD:
            return self.handle_chord_click(row, col)
        if kind == Click.PRIMARY:
            return self.handle_primary_click(row, col)
        if kind == Click.SECONDARY:
            return self.handle_secondary_click(row, col)
        return self._result()

    # clock

    def set_foreground(self, visible: bool) -> None:
        if visible == self.foreground:
            return
        self.foreground = visible
        self.timer.update(self._clock_active())

    def tick(self) -> bool:
        return self.timer.tick()

    def reset(self) -> None:
        """Start over on the same board size; the old clock is invalidated."""
        self.timer.reset()
        self._fresh()
        logger.debug("session reset %sx%s mines=%s", self.board.rows, self.board.cols, self.board.mine_count)

    # internals

    def _clock_active(self) -> bool:
        return self.phase == Phase.IN_PROGRESS and self.foreground

    def _start(self, row: int, col: int) -> None:
        if self._layout is not None:
            self._values = self._layout
        else:
            safe = zone(row, col, self.board.rows, self.board.cols)
            if self.board.mine_count > self.board.size - len(safe):
                # not enough room around the click; keep only the clicked cell safe
                safe = {index(row, col, self.board.cols)}
            self._values = generate(self.board, row, col, rng=self._rng, excluded=safe)
        self.phase = Phase.IN_PROGRESS
        self.timer.update(self._clock_active())
        logger.info("game started at (%s, %s) on %sx%s", row, col, self.board.rows, self.board.cols)

    def _evaluate(self) -> None:
        if self.phase != Phase.IN_PROGRESS:
            return
        kind = check_win(
            self.board,
            self._revealed,
            self._flagged,
            self._values,
            self.mines_left,
            loose=self.settings.loose_win_check,
        )
        if kind is None:
            return
        self.phase = Phase.WON
        self.win_kind = kind
        self.mines_left = 0
        self.timer.update(False)
        logger.info("game won via %s after %s seconds", kind.value, self.timer.elapsed)

    def _lose(self, idx: Optional[int], cause: str) -> None:
        self.phase = Phase.LOST
        self.exploded = idx
        self.loss_cause = cause
        self.timer.update(False)
        logger.info("game lost (%s) after %s seconds", cause, self.timer.elapsed)

    def _expire(self) -> None:
        if self.phase == Phase.IN_PROGRESS:
            self._lose(None, "timeout")

    def _result(self, hit_mine: bool = False, cleared: int = 0) -> Dict[str, Any]:
        return {
            "hit_mine": hit_mine,
            "cleared_cells": cleared,
            "status_after": self.phase.value,
            "revealed_total": sum(self._revealed),
            "flags_total": sum(self._flagged),
        }

    def end_result(self) -> Optional[str]:
        if self.phase == Phase.WON:
            return "win"
        if self.phase == Phase.LOST:
            return "lose"
        return None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "board": self.display_grid(),
            "rows": self.board.rows,
            "cols": self.board.cols,
            "mine_count": self.board.mine_count,
            "mines_left": self.mines_left,
            "elapsed": self.timer.elapsed,
            "moves_count": self.moves_count,
            "revealed_total": sum(self._revealed),
            "flags_total": sum(self._flagged),
            "preset": self.preset.id if self.preset else None,
            "end_result": self.end_result(),
            "win_kind": self.win_kind.value if self.win_kind else None,
            "loss_cause": self.loss_cause,
        }
