"""
Watch-list provider for simulated players.

Advances every active player with the autonomous agent at a fixed cadence,
independent of any player's own game speed. Each step replaces the stored
snapshot; this service is the only writer of active players.
"""

import logging
import random
import threading
from typing import List, Optional

from data_access.repositories import PlayerRepository
from domain.game_state import ActivePlayer
from players import Player, get_player_class, simulate_player_move
from .errors import NotFoundError
from .ticker import Ticker

logger = logging.getLogger(__name__)

DEFAULT_WATCH_TICK_MS = 200


class WatchService:
    """
    Owns the simulated players' update loop.

    Args:
        player_repo: Where ActivePlayer snapshots are stored
        tick_ms: Milliseconds between agent steps
        agent: Player used to choose moves (defaults to the registry default)
        rng: Random source for food placement and respawns
    """

    def __init__(
        self,
        player_repo: PlayerRepository,
        tick_ms: int = DEFAULT_WATCH_TICK_MS,
        agent: Optional[Player] = None,
        rng: Optional[random.Random] = None
    ):
        self.player_repo = player_repo
        self.tick_ms = tick_ms
        self.agent = agent or get_player_class()(rng)
        self.rng = rng
        self._step_lock = threading.Lock()
        self._ticker: Optional[Ticker] = None

    def list_players(self) -> List[ActivePlayer]:
        return self.player_repo.get_all()

    def get_player(self, player_id: str) -> ActivePlayer:
        player = self.player_repo.get_by_id(player_id)
        if player is None:
            raise NotFoundError(f"Player '{player_id}' not found")
        return player

    def step_player(self, player_id: str) -> ActivePlayer:
        with self._step_lock:
            player = self.get_player(player_id)
            return self._advance(player)

    def step_all(self) -> List[ActivePlayer]:
        """Advance every active player by one agent step."""
        with self._step_lock:
            return [self._advance(player) for player in self.player_repo.get_all()]

    def _advance(self, player: ActivePlayer) -> ActivePlayer:
        next_player = simulate_player_move(player, rng=self.rng, agent=self.agent)
        if next_player.started_at != player.started_at:
            logger.info(f"Simulated player {player.username} was cornered and respawned")
        try:
            return self.player_repo.replace(next_player)
        except KeyError:
            # Removed while we were stepping; nothing to update
            return next_player

    # -------------------------------------------------------------------------
    # Background loop
    # -------------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._ticker is not None and self._ticker.is_running

    def start(self) -> None:
        if self.is_running:
            return
        self._ticker = Ticker(self.step_all, self.tick_ms, name="watch-players")
        self._ticker.start()

    def stop(self) -> None:
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None
