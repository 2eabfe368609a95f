import asyncio

from sweeper.config import MAX_TIME, UNEXPLODED_MINE, GameSettings
from sweeper.grid import BoardConfig, Phase, index
from sweeper.session import GameSession
from sweeper.store import InMemorySessionStore
from sweeper.timer import SessionTimer

MINES = [(0, 3), (2, 3)]


def make_session(settings=None):
    return GameSession(BoardConfig(3, 4, len(MINES)), settings or GameSettings(), mines=MINES)


def test_timer_idle_before_first_reveal():
    s = make_session()
    assert s.tick() is False
    s.handle_secondary_click(0, 0)
    assert s.tick() is False
    assert s.elapsed == 0


def test_timer_counts_while_in_progress():
    s = make_session()
    s.handle_primary_click(0, 0)
    for _ in range(5):
        assert s.tick() is True
    assert s.elapsed == 5


def test_timeout_forces_loss_and_freezes():
    s = make_session()
    s.handle_primary_click(0, 0)
    for _ in range(MAX_TIME):
        s.tick()
    assert s.phase == Phase.LOST
    assert s.loss_cause == "timeout"
    assert s.elapsed == MAX_TIME
    assert s.tick() is False
    assert s.elapsed == MAX_TIME
    assert s.display[index(0, 3, 4)] == UNEXPLODED_MINE
    assert s.exploded is None
    s.handle_primary_click(1, 3)
    assert s.revealed[index(1, 3, 4)] is False


def test_timer_freezes_on_win():
    s = make_session()
    s.handle_primary_click(0, 0)
    s.tick()
    s.handle_primary_click(1, 3)
    assert s.phase == Phase.WON
    assert s.tick() is False
    assert s.elapsed == 1


def test_background_pauses_clock():
    s = make_session()
    s.handle_primary_click(0, 0)
    s.tick()
    s.set_foreground(False)
    assert s.tick() is False
    assert s.elapsed == 1
    s.set_foreground(True)
    assert s.tick() is True
    assert s.elapsed == 2


def test_stale_generation_is_ignored():
    timer = SessionTimer(max_seconds=10)
    timer.update(True)
    stale = timer.generation
    timer.update(False)
    timer.update(True)
    assert timer.tick(stale) is False
    assert timer.tick(timer.generation) is True
    assert timer.elapsed == 1


def test_reset_zeroes_and_waits_for_first_reveal():
    s = make_session()
    s.handle_primary_click(0, 0)
    s.tick()
    s.tick()
    s.reset()
    assert s.elapsed == 0
    assert s.phase == Phase.NOT_STARTED
    assert s.tick() is False


def test_clock_runs_on_event_loop():
    settings = GameSettings(max_time=3, tick_interval=0.01)

    async def scenario():
        s = make_session(settings)
        s.handle_primary_click(0, 0)
        await asyncio.sleep(0.3)
        return s

    s = asyncio.run(scenario())
    assert s.phase == Phase.LOST
    assert s.elapsed == 3


def test_reset_cancels_pending_tick():
    settings = GameSettings(tick_interval=0.05)

    async def scenario():
        s = make_session(settings)
        s.handle_primary_click(0, 0)
        s.reset()
        await asyncio.sleep(0.2)
        return s

    s = asyncio.run(scenario())
    assert s.elapsed == 0
    assert s.phase == Phase.NOT_STARTED


def test_repeated_visibility_does_not_restart_clock():
    s = make_session()
    s.handle_primary_click(0, 0)
    generation = s.timer.generation
    s.set_foreground(True)
    assert s.timer.generation == generation
    assert s.timer.tick(generation) is True
    assert s.elapsed == 1


def test_clock_keeps_counting_under_visibility_spam():
    settings = GameSettings(tick_interval=0.05)

    async def scenario():
        s = make_session(settings)
        s.handle_primary_click(0, 0)
        for _ in range(20):
            s.set_foreground(True)
            await asyncio.sleep(0.03)
        return s

    s = asyncio.run(scenario())
    assert s.elapsed >= 5


def test_replacing_session_cancels_old_clock():
    settings = GameSettings(tick_interval=0.05)
    store = InMemorySessionStore(settings)

    async def scenario():
        old = store.start("u1", 3, 3, 1, rng_seed=5)
        old.handle_primary_click(1, 1)
        assert old.phase == Phase.IN_PROGRESS and old.timer.running
        new = store.start_for_viewport("u1", 100, rng_seed=5)
        await asyncio.sleep(0.2)
        return old, new

    old, new = asyncio.run(scenario())
    assert old.elapsed == 0
    assert old.timer.running is False
    assert new.elapsed == 0
    assert store.require("u1") is new
