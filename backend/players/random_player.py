"""
Random player implementation - picks random safe moves.
"""

from domain.game_state import ActivePlayer
from .base import Player, safe_moves


class RandomPlayer(Player):
    """
    A random AI that picks a direction that avoids walls and self-collisions.
    """

    def get_move(self, player_state: ActivePlayer) -> str:
        valid_moves = [direction for direction, _ in safe_moves(player_state)]

        # Cornered: keep going and let the caller deal with the collision
        if not valid_moves:
            return player_state.direction

        return self.rng.choice(valid_moves)
