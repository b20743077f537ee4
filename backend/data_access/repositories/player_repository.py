"""
Player repository for the simulated players shown in watch mode.
"""

from typing import List, Optional

from domain.game_state import ActivePlayer
from .base import BaseRepository


class PlayerRepository(BaseRepository):
    """
    Repository for ActivePlayer snapshots.

    Snapshots are immutable, so updating a player means replacing it.
    """

    def get_all(self) -> List[ActivePlayer]:
        with self.read() as store:
            return list(store.active_players.values())

    def get_by_id(self, player_id: str) -> Optional[ActivePlayer]:
        with self.read() as store:
            return store.active_players.get(player_id)

    def add(self, player: ActivePlayer) -> ActivePlayer:
        with self.transaction() as store:
            if player.id in store.active_players:
                raise ValueError(f"Player with id {player.id} already exists.")
            store.active_players[player.id] = player
            return player

    def replace(self, player: ActivePlayer) -> ActivePlayer:
        """
        Store the next snapshot for an existing player.

        Raises:
            KeyError: If the player is unknown.
        """
        with self.transaction() as store:
            if player.id not in store.active_players:
                raise KeyError(player.id)
            store.active_players[player.id] = player
            return player

    def remove(self, player_id: str) -> bool:
        with self.transaction() as store:
            return store.active_players.pop(player_id, None) is not None
