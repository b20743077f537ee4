"""
Game sessions - the driving loop for a player's game.

A GameSession is the single writer of one GameState. Input (start, pause,
direction, mode, reset) and ticks all go through the session lock, so each
transition sees the result of the previous one and nothing else touches
the snapshot.
"""

import logging
import random
import threading
import time
import uuid
from typing import Any, Callable, Dict, Optional, Tuple

from domain.constants import GAME_OVER, GRID_SIZE, PLAYING, VALID_MODES, VALID_MOVES, WALLS
from domain.game_state import GameState
from domain.rules import (
    calculate_final_score,
    create_initial_state,
    move_snake,
    reset_game,
    set_direction,
    set_game_mode,
    start_game,
    toggle_pause,
)
from .errors import NotFoundError
from .ticker import Ticker

logger = logging.getLogger(__name__)

# Called with (session, final_score, mode) after a game ends, outside the session lock
GameOverHandler = Callable[["GameSession", int, str], None]

DEFAULT_SESSION_TTL_SECONDS = 3600


class GameSession:
    """
    Owns one GameState and, optionally, the ticker that advances it.

    Attributes:
        session_id: unique id (uuid4 hex)
        user_token: auth token of the player, if logged in
        final_score: multiplied score of the last finished game
    """

    def __init__(
        self,
        mode: str = WALLS,
        grid_size: int = GRID_SIZE,
        session_id: Optional[str] = None,
        user_token: Optional[str] = None,
        auto_tick: bool = False,
        on_game_over: Optional[GameOverHandler] = None,
        rng: Optional[random.Random] = None
    ):
        if mode not in VALID_MODES:
            raise ValueError(f"Unknown game mode '{mode}'")

        self.session_id = session_id or uuid.uuid4().hex
        self.user_token = user_token
        self.auto_tick = auto_tick
        self.on_game_over = on_game_over
        self.rng = rng
        self.final_score: Optional[int] = None
        self._lock = threading.RLock()
        self._state = create_initial_state(mode, grid_size=grid_size, rng=rng)
        self._ticker: Optional[Ticker] = None

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def state(self) -> GameState:
        with self._lock:
            return self._state

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            data = self._state.to_dict()
            data["session_id"] = self.session_id
            data["final_score"] = self.final_score
            return data

    # -------------------------------------------------------------------------
    # Input entry points
    # -------------------------------------------------------------------------

    def start(self) -> GameState:
        with self._lock:
            self._state = start_game(self._state, rng=self.rng)
            if self._state.status == PLAYING:
                self.final_score = None
            self._sync_ticker()
            return self._state

    def toggle_pause(self) -> GameState:
        with self._lock:
            self._state = toggle_pause(self._state)
            self._sync_ticker()
            return self._state

    def set_direction(self, direction: str) -> GameState:
        if direction not in VALID_MOVES:
            raise ValueError(f"Unknown direction '{direction}'")
        with self._lock:
            self._state = set_direction(self._state, direction)
            return self._state

    def set_mode(self, mode: str) -> GameState:
        if mode not in VALID_MODES:
            raise ValueError(f"Unknown game mode '{mode}'")
        with self._lock:
            previous = self._state
            self._state = set_game_mode(previous, mode, rng=self.rng)
            if self._state is not previous:
                self.final_score = None
            return self._state

    def reset(self) -> GameState:
        with self._lock:
            self._state = reset_game(self._state, rng=self.rng)
            self.final_score = None
            self._sync_ticker()
            return self._state

    # -------------------------------------------------------------------------
    # Driving loop
    # -------------------------------------------------------------------------

    def tick(self) -> GameState:
        """Advance one tick; fires the game-over handler on the terminal tick."""
        with self._lock:
            state, finished = self._advance()
        if finished:
            self._notify_game_over(state)
        return state

    def _advance(self) -> Tuple[GameState, bool]:
        """Apply one tick. Caller holds the lock. Returns (state, just_finished)."""
        previous = self._state
        self._state = move_snake(previous, rng=self.rng)
        finished = previous.status == PLAYING and self._state.status == GAME_OVER
        if finished:
            self.final_score = calculate_final_score(self._state.score, self._state.mode)
            logger.info(
                f"Game over in session {self.session_id}: score={self._state.score}, "
                f"final={self.final_score}, mode={self._state.mode}"
            )
        return self._state, finished

    def _current_speed(self) -> int:
        with self._lock:
            return self._state.speed

    def _sync_ticker(self) -> None:
        """Run a ticker exactly while the game is playing. Caller holds the lock."""
        if not self.auto_tick:
            return

        if self._state.status == PLAYING:
            if self._ticker is None:
                self._start_ticker()
        elif self._ticker is not None:
            # No join here: the ticker thread may be waiting for this lock
            self._ticker.stop(wait=False)
            self._ticker = None

    def _start_ticker(self) -> None:
        def step() -> bool:
            with self._lock:
                # A ticker replaced by pause/resume must not tick again
                if self._ticker is not ticker:
                    return False
                state, finished = self._advance()
                if state.status != PLAYING:
                    self._ticker = None
            if finished:
                self._notify_game_over(state)
            return state.status == PLAYING

        ticker = Ticker(step, self._current_speed, name=f"game-{self.session_id[:8]}")
        self._ticker = ticker
        ticker.start()

    def _notify_game_over(self, state: GameState) -> None:
        """Run the game-over handler. Never called with the session lock held."""
        if self.on_game_over is None:
            return
        final_score = calculate_final_score(state.score, state.mode)
        try:
            self.on_game_over(self, final_score, state.mode)
        except Exception as e:
            # The game is over either way; a failed submission is reported, not retried
            logger.error(f"Game-over handler failed for session {self.session_id}: {e}")

    def close(self) -> None:
        with self._lock:
            ticker, self._ticker = self._ticker, None
        if ticker is not None:
            ticker.stop()

    def __repr__(self):
        return f"<GameSession id={self.session_id}, state={self._state!r}>"


class SessionManager:
    """
    Creates and looks up game sessions by id.

    Scores of finished games are submitted for logged-in players when a
    submit callable is given (normally LeaderboardService.submit_score).

    Sessions that are not playing and have not been looked up for
    ``session_ttl`` seconds are evicted whenever a new session is created.
    A ttl of None keeps sessions until they are removed explicitly.
    """

    def __init__(
        self,
        grid_size: int = GRID_SIZE,
        auto_tick: bool = False,
        submit_score: Optional[Callable[[Optional[str], int, str], Any]] = None,
        rng: Optional[random.Random] = None,
        session_ttl: Optional[float] = DEFAULT_SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        self.grid_size = grid_size
        self.auto_tick = auto_tick
        self.submit_score = submit_score
        self.rng = rng
        self.session_ttl = session_ttl
        self._clock = clock
        self._sessions: Dict[str, GameSession] = {}
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def create(self, mode: str = WALLS, user_token: Optional[str] = None) -> GameSession:
        self.evict_stale()
        session = GameSession(
            mode=mode,
            grid_size=self.grid_size,
            user_token=user_token,
            auto_tick=self.auto_tick,
            on_game_over=self._handle_game_over,
            rng=self.rng,
        )
        with self._lock:
            self._sessions[session.session_id] = session
            self._last_seen[session.session_id] = self._clock()
        logger.info(f"Created game session {session.session_id} (mode={mode})")
        return session

    def get(self, session_id: str) -> GameSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._last_seen[session_id] = self._clock()
        if session is None:
            raise NotFoundError(f"Game '{session_id}' not found")
        return session

    def remove(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
            self._last_seen.pop(session_id, None)
        if session is not None:
            session.close()

    def evict_stale(self) -> int:
        """Drop idle, paused and finished sessions older than the ttl. Returns how many."""
        if self.session_ttl is None:
            return 0

        cutoff = self._clock() - self.session_ttl
        with self._lock:
            stale = [
                session_id
                for session_id, last_seen in self._last_seen.items()
                if last_seen < cutoff and self._sessions[session_id].state.status != PLAYING
            ]
            sessions = [self._sessions.pop(session_id) for session_id in stale]
            for session_id in stale:
                del self._last_seen[session_id]

        for session in sessions:
            session.close()
        if sessions:
            logger.info(f"Evicted {len(sessions)} stale game sessions")
        return len(sessions)

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
            self._last_seen.clear()
        for session in sessions:
            session.close()

    def __len__(self):
        with self._lock:
            return len(self._sessions)

    def _handle_game_over(self, session: GameSession, final_score: int, mode: str) -> None:
        if self.submit_score is None or not session.user_token or final_score <= 0:
            return
        self.submit_score(session.user_token, final_score, mode)
