from __future__ import annotations

from typing import Any, Dict, Optional

from .config import DEFAULT_SETTINGS, GameSettings
from .grid import BoardConfig
from .session import GameSession


class InMemorySessionStore:
    """Live sessions keyed by player id. Nothing outlives the process."""

    def __init__(self, settings: GameSettings = DEFAULT_SETTINGS) -> None:
        self.settings = settings
        self.sessions: Dict[str, GameSession] = {}

    def require(self, user_id: str) -> GameSession:
        session = self.sessions.get(user_id)
        if session is None:
            raise KeyError("game_not_found")
        return session

    def _install(self, user_id: str, session: GameSession) -> GameSession:
        old = self.sessions.get(user_id)
        if old is not None:
            old.timer.reset()
        self.sessions[user_id] = session
        return session

    def start(
        self,
        user_id: str,
        rows: int,
        cols: int,
        mine_count: int,
        rng_seed: Optional[int] = None,
    ) -> GameSession:
        board = BoardConfig(rows, cols, mine_count)
        return self._install(user_id, GameSession(board, self.settings, rng_seed=rng_seed))

    def start_for_viewport(self, user_id: str, viewport_width: int, rng_seed: Optional[int] = None) -> GameSession:
        return self._install(user_id, GameSession.for_viewport(viewport_width, self.settings, rng_seed=rng_seed))

    def reset(self, user_id: str) -> GameSession:
        session = self.require(user_id)
        session.reset()
        return session

    def discard(self, user_id: str) -> None:
        session = self.sessions.pop(user_id, None)
        if session is not None:
            session.timer.reset()

    def to_client(self, user_id: str) -> Dict[str, Any]:
        return self.require(user_id).snapshot() | {"game_id": user_id}
