"""
Tests for services/game_session.py and services/ticker.py.

Sessions use a 5x5 board: the snake starts at (2, 2) heading RIGHT and hits
the wall on the third tick.
"""

import pytest
import random
import sys
import os
import threading
import time
from dataclasses import replace
from unittest.mock import Mock, patch

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from domain.constants import DOWN, GAME_OVER, IDLE, LEFT, PASS_THROUGH, PAUSED, PLAYING, WALLS
from data_access import LeaderboardRepository, UserRepository, create_store
from services import AuthService, GameSession, LeaderboardService, NotFoundError, SessionManager, Ticker


def wait_for(condition, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()


def make_session(**kwargs):
    kwargs.setdefault("grid_size", 5)
    kwargs.setdefault("rng", random.Random(0))
    return GameSession(**kwargs)


def feed(session, food):
    """Place the food on the board of a running session."""
    session._state = replace(session.state, food=food)


class TestGameSession:
    """Tests for GameSession."""

    def test_new_session_is_idle(self):
        session = make_session()
        assert session.state.status == IDLE
        assert session.state.snake == ((2, 2), (1, 2), (0, 2))
        assert len(session.session_id) == 32

    def test_invalid_mode(self):
        with pytest.raises(ValueError, match="Unknown game mode"):
            make_session(mode="maze")

    def test_tick_does_nothing_until_started(self):
        session = make_session()
        before = session.state
        assert session.tick() == before

    def test_game_runs_into_wall(self):
        on_game_over = Mock()
        session = make_session(on_game_over=on_game_over)
        session.start()
        feed(session, (0, 0))

        session.tick()
        session.tick()
        assert session.state.head == (4, 2)
        assert session.final_score is None

        session.tick()
        assert session.state.status == GAME_OVER
        assert session.final_score == 0
        on_game_over.assert_called_once_with(session, 0, WALLS)

        # Further ticks are no-ops and do not fire the handler again
        session.tick()
        on_game_over.assert_called_once()

    def test_final_score_uses_mode_multiplier(self):
        session = make_session()
        session.start()
        feed(session, (3, 2))
        session.tick()
        assert session.state.score == 10
        feed(session, (0, 0))
        while session.state.status == PLAYING:
            session.tick()
        assert session.final_score == 15
        assert session.snapshot()["final_score"] == 15

    def test_handler_errors_are_contained(self):
        session = make_session(on_game_over=Mock(side_effect=RuntimeError("down")))
        session.start()
        feed(session, (0, 0))
        for _ in range(3):
            session.tick()
        assert session.state.status == GAME_OVER

    def test_handler_runs_outside_session_lock(self):
        readers = []

        def on_game_over(session, final_score, mode):
            reader = threading.Thread(target=lambda: readers.append(session.snapshot()))
            reader.start()
            reader.join(1.0)

        session = make_session(on_game_over=on_game_over)
        session.start()
        feed(session, (0, 0))
        for _ in range(3):
            session.tick()
        assert len(readers) == 1
        assert readers[0]["status"] == GAME_OVER

    def test_set_mode_after_game_over_clears_final_score(self):
        session = make_session()
        session.start()
        feed(session, (3, 2))
        session.tick()
        feed(session, (0, 0))
        while session.state.status == PLAYING:
            session.tick()
        assert session.final_score == 15

        session.set_mode(PASS_THROUGH)
        assert session.snapshot()["final_score"] is None
        assert session.state.status == IDLE

    def test_set_direction(self):
        session = make_session()
        session.start()
        session.set_direction(DOWN)
        assert session.state.next_direction == DOWN
        assert session.tick().head == (2, 3)

    def test_set_direction_rejects_reversal_silently(self):
        session = make_session()
        session.start()
        session.set_direction(LEFT)
        assert session.state.next_direction != LEFT

    def test_set_direction_invalid(self):
        session = make_session()
        with pytest.raises(ValueError, match="Unknown direction"):
            session.set_direction("NORTH")

    def test_set_mode(self):
        session = make_session()
        assert session.set_mode(PASS_THROUGH).mode == PASS_THROUGH
        with pytest.raises(ValueError):
            session.set_mode("maze")

    def test_set_mode_ignored_while_playing(self):
        session = make_session()
        session.start()
        assert session.set_mode(PASS_THROUGH).mode == WALLS

    def test_pass_through_wraps(self):
        session = make_session(mode=PASS_THROUGH)
        session.start()
        feed(session, (0, 0))
        for _ in range(3):
            session.tick()
        assert session.state.status == PLAYING
        assert session.state.head == (0, 2)

    def test_pause_and_resume(self):
        session = make_session()
        session.start()
        assert session.toggle_pause().status == PAUSED
        head = session.state.head
        session.tick()
        assert session.state.head == head
        assert session.toggle_pause().status == PLAYING

    def test_reset_keeps_high_score(self):
        session = make_session()
        session.start()
        feed(session, (3, 2))
        session.tick()
        feed(session, (0, 0))
        while session.state.status == PLAYING:
            session.tick()

        state = session.reset()
        assert state.status == IDLE
        assert state.score == 0
        assert state.high_score == 10
        assert session.final_score is None

    def test_snapshot(self):
        session = make_session(session_id="abc")
        data = session.snapshot()
        assert data["session_id"] == "abc"
        assert data["status"] == IDLE
        assert data["final_score"] is None


class TestAutoTick:
    """Sessions with a background ticker."""

    def test_ticker_plays_until_game_over(self):
        session = make_session(auto_tick=True)
        session.start()
        try:
            assert wait_for(lambda: session.state.status == GAME_OVER)
            assert wait_for(lambda: session._ticker is None)
        finally:
            session.close()

    def test_pause_stops_ticker(self):
        session = make_session(auto_tick=True)
        session.start()
        try:
            assert session._ticker is not None
            session.toggle_pause()
            assert session._ticker is None
            head = session.state.head
            time.sleep(0.4)
            assert session.state.head == head
        finally:
            session.close()

    def test_close_stops_ticker(self):
        session = make_session(auto_tick=True, grid_size=20)
        session.start()
        ticker = session._ticker
        session.close()
        assert not ticker.is_running


class TestSessionManager:
    """Tests for SessionManager."""

    def test_create_and_get(self):
        manager = SessionManager(grid_size=5, rng=random.Random(0))
        session = manager.create(mode=PASS_THROUGH, user_token="tok")
        assert manager.get(session.session_id) is session
        assert session.state.mode == PASS_THROUGH
        assert len(manager) == 1

    def test_get_unknown(self):
        with pytest.raises(NotFoundError):
            SessionManager().get("missing")

    def test_remove(self):
        manager = SessionManager()
        session = manager.create()
        manager.remove(session.session_id)
        manager.remove(session.session_id)
        assert len(manager) == 0

    def test_close_all(self):
        manager = SessionManager()
        manager.create()
        manager.create()
        manager.close_all()
        assert len(manager) == 0

    def test_submits_final_score_for_logged_in_player(self):
        submit = Mock()
        manager = SessionManager(grid_size=5, submit_score=submit, rng=random.Random(0))
        session = manager.create(user_token="tok")
        session.start()
        feed(session, (3, 2))
        session.tick()
        feed(session, (0, 0))
        while session.state.status == PLAYING:
            session.tick()
        submit.assert_called_once_with("tok", 15, WALLS)

    def test_no_submission_without_token_or_score(self):
        submit = Mock()
        manager = SessionManager(grid_size=5, submit_score=submit, rng=random.Random(0))

        anonymous = manager.create()
        anonymous.start()
        feed(anonymous, (3, 2))
        anonymous.tick()
        feed(anonymous, (0, 0))
        while anonymous.state.status == PLAYING:
            anonymous.tick()

        scoreless = manager.create(user_token="tok")
        scoreless.start()
        feed(scoreless, (0, 0))
        while scoreless.state.status == PLAYING:
            scoreless.tick()

        submit.assert_not_called()

    def test_evicts_stale_sessions_that_are_not_playing(self):
        now = [0.0]
        manager = SessionManager(grid_size=5, rng=random.Random(0), session_ttl=60, clock=lambda: now[0])
        idle = manager.create()
        playing = manager.create()
        playing.start()

        now[0] = 30.0
        recent = manager.create()
        now[0] = 61.0
        assert manager.evict_stale() == 1

        with pytest.raises(NotFoundError):
            manager.get(idle.session_id)
        assert manager.get(playing.session_id) is playing
        assert manager.get(recent.session_id) is recent

    def test_lookup_keeps_session_alive(self):
        now = [0.0]
        manager = SessionManager(grid_size=5, session_ttl=60, clock=lambda: now[0])
        session = manager.create()
        now[0] = 50.0
        manager.get(session.session_id)
        now[0] = 100.0
        manager.create()
        assert manager.get(session.session_id) is session
        assert len(manager) == 2

    def test_no_ttl_keeps_sessions(self):
        now = [0.0]
        manager = SessionManager(session_ttl=None, clock=lambda: now[0])
        manager.create()
        now[0] = 1e9
        assert manager.evict_stale() == 0
        assert len(manager) == 1

    def test_slow_score_webhook_does_not_block_session(self, monkeypatch):
        monkeypatch.setenv("SCORE_WEBHOOK_URL", "https://hooks.example.com/scores")
        release = threading.Event()

        def slow_post(*args, **kwargs):
            release.wait(5.0)
            return Mock()

        store = create_store(seed=True, rng=random.Random(0))
        auth = AuthService(UserRepository(store))
        leaderboard = LeaderboardService(LeaderboardRepository(store), auth)
        manager = SessionManager(grid_size=5, submit_score=leaderboard.submit_score, rng=random.Random(0))
        token = auth.login("neon@example.com", "pw")["token"]
        session = manager.create(user_token=token)

        with patch('services.webhook_service.requests.post', side_effect=slow_post) as mock_post:
            try:
                session.start()
                feed(session, (3, 2))
                session.tick()
                feed(session, (0, 0))

                started = time.monotonic()
                while session.state.status == PLAYING:
                    session.tick()
                assert time.monotonic() - started < 1.0

                started = time.monotonic()
                assert session.snapshot()["final_score"] == 15
                assert time.monotonic() - started < 0.5
                assert any(
                    entry["username"] == "NeonGamer" and entry["score"] == 15
                    for entry in leaderboard.get_leaderboard(mode=WALLS)
                )
            finally:
                release.set()
                leaderboard.shutdown()
            mock_post.assert_called_once()


class TestTicker:
    """Tests for the background Ticker."""

    def test_step_called_repeatedly(self):
        calls = []
        ticker = Ticker(lambda: calls.append(1), 5)
        ticker.start()
        try:
            assert wait_for(lambda: len(calls) >= 3)
        finally:
            ticker.stop()
        assert not ticker.is_running

    def test_returning_false_stops(self):
        ticker = Ticker(lambda: False, 5)
        ticker.start()
        assert wait_for(lambda: not ticker.is_running)
        assert ticker.ticks == 1

    def test_step_exception_stops(self):
        ticker = Ticker(Mock(side_effect=RuntimeError("boom")), 5)
        ticker.start()
        assert wait_for(lambda: not ticker.is_running)
        assert ticker.ticks == 0

    def test_interval_is_re_read(self):
        interval = {"ms": 1000}
        ticker = Ticker(lambda: None, lambda: interval["ms"])
        assert ticker.interval_seconds() == 1.0
        interval["ms"] = 50
        assert ticker.interval_seconds() == 0.05

    def test_stop_from_own_step(self):
        stopped = threading.Event()

        def step():
            ticker.stop()
            stopped.set()

        ticker = Ticker(step, 5)
        ticker.start()
        assert stopped.wait(3.0)
        assert wait_for(lambda: not ticker.is_running)
