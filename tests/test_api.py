from fastapi.testclient import TestClient

from app.main import create_app
from sweeper.config import GameSettings
from sweeper.store import InMemorySessionStore


def make_client():
    app = create_app(store=InMemorySessionStore(GameSettings()))
    return TestClient(app)


def test_start_and_state():
    c = make_client()
    headers = {"X-User-Id": "u1"}
    r = c.post("/api/sweeper/start", json={"rows": 5, "cols": 6, "mine_count": 4}, headers=headers)
    assert r.status_code == 200
    s = c.get("/api/sweeper/state", headers=headers).json()
    assert s["rows"] == 5 and s["cols"] == 6
    assert s["phase"] == "not_started"
    assert s["mines_left"] == 4
    assert s["elapsed"] == 0
    assert s["board"] == [["0"] * 6 for _ in range(5)]


def test_state_without_game_404():
    c = make_client()
    r = c.get("/api/sweeper/state", headers={"X-User-Id": "nobody"})
    assert r.status_code == 404


def test_start_from_viewport_uses_preset():
    c = make_client()
    headers = {"X-User-Id": "u2"}
    r = c.post("/api/sweeper/start", json={"viewport_width": 1100}, headers=headers)
    assert r.status_code == 200
    s = r.json()
    assert s["preset"] == "desktop-s"
    assert (s["rows"], s["cols"], s["mine_count"]) == (12, 30, 2)


def test_invalid_board_400():
    c = make_client()
    headers = {"X-User-Id": "u3"}
    r = c.post("/api/sweeper/start", json={"rows": 3, "cols": 3, "mine_count": 9}, headers=headers)
    assert r.status_code == 400
    assert "invalid_mine_count" in r.text


def test_start_requires_shape_422():
    c = make_client()
    r = c.post("/api/sweeper/start", json={"rows": 3}, headers={"X-User-Id": "u4"})
    assert r.status_code == 422


def test_click_flag_and_reset():
    c = make_client()
    headers = {"X-User-Id": "u5"}
    c.post("/api/sweeper/start", json={"rows": 9, "cols": 9, "mine_count": 10, "rng_seed": 3}, headers=headers)
    s1 = c.post("/api/sweeper/click", json={"row": 8, "col": 8, "button": "secondary"}, headers=headers).json()
    assert s1["phase"] == "not_started"
    assert s1["board"][8][8] == "F"
    assert s1["mines_left"] == 9
    r = c.post("/api/sweeper/click", json={"row": 4, "col": 4}, headers=headers)
    assert r.status_code == 200
    s2 = r.json()
    assert s2["last_move"]["hit_mine"] is False
    assert s2["phase"] in ("in_progress", "won")
    assert s2["moves_count"] == 2
    assert s2["board"][4][4] == "Z"
    r = c.post("/api/sweeper/reset", headers=headers)
    s3 = r.json()
    assert s3["phase"] == "not_started"
    assert s3["moves_count"] == 0
    assert s3["mines_left"] == 10


def test_press_and_release_classify_clicks():
    c = make_client()
    headers = {"X-User-Id": "u6"}
    c.post("/api/sweeper/start", json={"rows": 4, "cols": 4, "mine_count": 1, "rng_seed": 1}, headers=headers)
    c.post("/api/sweeper/press", json={"row": 0, "col": 0, "button": "secondary"}, headers=headers)
    s = c.post("/api/sweeper/release", json={"row": 0, "col": 0}, headers=headers).json()
    assert s["board"][0][0] == "F"
    assert s["mines_left"] == 0
    c.post("/api/sweeper/press", json={"row": 0, "col": 0, "button": "secondary"}, headers=headers)
    s = c.post("/api/sweeper/release", json={"row": 0, "col": 0}, headers=headers).json()
    assert s["board"][0][0] == "0"
    c.post("/api/sweeper/press", json={"row": 3, "col": 3, "button": "primary"}, headers=headers)
    s = c.post("/api/sweeper/release", json={"row": 3, "col": 3}, headers=headers).json()
    assert s["phase"] != "not_started"
    assert s["last_move"]["hit_mine"] is False


def test_visibility_and_abandon():
    c = make_client()
    headers = {"X-User-Id": "u7"}
    c.post("/api/sweeper/start", json={"rows": 5, "cols": 5, "mine_count": 3}, headers=headers)
    r = c.post("/api/sweeper/visibility", json={"visible": False}, headers=headers)
    assert r.status_code == 200
    r = c.delete("/api/sweeper/game", headers=headers)
    assert r.json()["status"] == "abandoned"
    assert c.get("/api/sweeper/state", headers=headers).status_code == 404


def test_isolation_between_two_users():
    c = make_client()
    h1 = {"X-User-Id": "user_a"}
    h2 = {"X-User-Id": "user_b"}
    c.post("/api/sweeper/start", json={"rows": 6, "cols": 6, "mine_count": 4}, headers=h1)
    c.post("/api/sweeper/start", json={"rows": 6, "cols": 6, "mine_count": 4}, headers=h2)
    c.post("/api/sweeper/click", json={"row": 0, "col": 0}, headers=h1)
    s1 = c.get("/api/sweeper/state", headers=h1).json()
    s2 = c.get("/api/sweeper/state", headers=h2).json()
    assert s1["moves_count"] == 1
    assert s2["moves_count"] == 0
    assert s1["game_id"] != s2["game_id"]
