import os
import logging
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field, model_validator
from dotenv import load_dotenv

from sweeper.config import DEFAULT_SETTINGS, GameSettings
from sweeper.input import Button, Click
from sweeper.store import InMemorySessionStore

load_dotenv(dotenv_path=Path('.env.local'))

API_BASE = "/api/sweeper"


def _truthy(value: Optional[str]) -> bool:
    return (value or "").lower() in ("1", "true", "yes")


def load_settings() -> GameSettings:
    max_time = os.getenv("SWEEPER_MAX_TIME")
    interval = os.getenv("SWEEPER_TICK_INTERVAL")
    loose = os.getenv("SWEEPER_LOOSE_WIN")
    return DEFAULT_SETTINGS.with_overrides(
        max_time=int(max_time) if max_time else None,
        tick_interval=float(interval) if interval else None,
        loose_win_check=_truthy(loose) if loose is not None else None,
    )


class StartBody(BaseModel):
    rows: Optional[int] = Field(None, ge=1, le=40)
    cols: Optional[int] = Field(None, ge=1, le=40)
    mine_count: Optional[int] = Field(None, ge=1)
    viewport_width: Optional[int] = Field(None, ge=0)
    rng_seed: Optional[int] = None

    @model_validator(mode="after")
    def _one_shape(self):
        explicit = (self.rows, self.cols, self.mine_count)
        if self.viewport_width is None and any(v is None for v in explicit):
            raise ValueError("rows, cols and mine_count are required without viewport_width")
        return self


class CellBody(BaseModel):
    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)


class ClickBody(CellBody):
    button: Click = Click.PRIMARY


class ButtonBody(CellBody):
    button: Button


class VisibilityBody(BaseModel):
    visible: bool


def create_app(store=None) -> FastAPI:
    app = FastAPI(title="Sweeper Service", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    app.state.store = store or InMemorySessionStore(load_settings())
    logger = logging.getLogger("uvicorn.error")

    @app.on_event("startup")
    async def _log_settings():
        s = app.state.store.settings
        logger.info(
            f"[sweeper] max_time={s.max_time} tick_interval={s.tick_interval} "
            f"loose_win_check={int(s.loose_win_check)} presets={len(s.presets)}"
        )

    def get_user_id(req: Request) -> str:
        allow_anon = _truthy(os.getenv("ALLOW_ANON", "1"))
        default_uid = os.getenv("DEFAULT_USER_ID", "local-user")
        uid = req.headers.get("X-User-Id")
        if uid:
            return uid
        if allow_anon:
            return default_uid
        logger.warning("[sweeper] get_user_id missing user id allow_anon=0")
        raise HTTPException(status_code=401, detail="missing user id")

    def client_state(user_id: str, result=None):
        try:
            resp = app.state.store.to_client(user_id)
        except KeyError:
            raise HTTPException(status_code=404, detail="no game")
        if result is not None:
            resp["last_move"] = result
        return resp

    def session_for(user_id: str):
        try:
            return app.state.store.require(user_id)
        except KeyError:
            raise HTTPException(status_code=404, detail="no game")

    @app.post(f"{API_BASE}/start")
    async def start_game(body: StartBody, user_id: str = Depends(get_user_id)):
        try:
            if body.viewport_width is not None:
                session = app.state.store.start_for_viewport(user_id, body.viewport_width, rng_seed=body.rng_seed)
            else:
                session = app.state.store.start(
                    user_id, body.rows, body.cols, body.mine_count, rng_seed=body.rng_seed
                )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        b = session.board
        logger.info(f"[sweeper] start user_id={user_id} board={b.rows}x{b.cols} mines={b.mine_count}")
        return client_state(user_id)

    @app.get(f"{API_BASE}/state")
    async def get_state(user_id: str = Depends(get_user_id)):
        return client_state(user_id)

    @app.post(f"{API_BASE}/click")
    async def click(body: ClickBody, user_id: str = Depends(get_user_id)):
        session = session_for(user_id)
        result = session.dispatch(body.button, body.row, body.col)
        return client_state(user_id, result)

    @app.post(f"{API_BASE}/press")
    async def press(body: ButtonBody, user_id: str = Depends(get_user_id)):
        session = session_for(user_id)
        session.press(body.button, body.row, body.col)
        return client_state(user_id)

    @app.post(f"{API_BASE}/release")
    async def release(body: CellBody, user_id: str = Depends(get_user_id)):
        session = session_for(user_id)
        result = session.release(body.row, body.col)
        return client_state(user_id, result)

    @app.post(f"{API_BASE}/visibility")
    async def visibility(body: VisibilityBody, user_id: str = Depends(get_user_id)):
        session = session_for(user_id)
        session.set_foreground(body.visible)
        return client_state(user_id)

    @app.post(f"{API_BASE}/reset")
    async def reset(user_id: str = Depends(get_user_id)):
        session_for(user_id)
        app.state.store.reset(user_id)
        return client_state(user_id)

    @app.delete(f"{API_BASE}/game")
    async def abandon(user_id: str = Depends(get_user_id)):
        session_for(user_id)
        app.state.store.discard(user_id)
        logger.info(f"[sweeper] abandon user_id={user_id}")
        return {"game_id": user_id, "status": "abandoned"}

    # Static frontend
    frontend_dir = Path(__file__).resolve().parent.parent / "frontend"
    if frontend_dir.exists():
        app.mount("/", StaticFiles(directory=str(frontend_dir), html=True), name="frontend")

    return app


app = create_app()
