"""
Base player interface for the game engine.
"""

import random
from typing import List, Optional, Tuple

from domain.constants import DIRECTION_ORDER, OPPOSITE_DIRECTIONS
from domain.game_state import ActivePlayer
from domain.snake import Position, check_self_collision, next_head


class Player:
    """
    Base class/interface for autonomous player logic.

    Each player is responsible for returning the next heading for a
    simulated snake given its current state.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random

    def get_move(self, player_state: ActivePlayer) -> str:
        """
        Return a move direction given the current player state.

        Args:
            player_state: Current state of the simulated player

        Returns:
            One of: "UP", "DOWN", "LEFT", "RIGHT"
        """
        raise NotImplementedError


def safe_moves(player_state: ActivePlayer) -> List[Tuple[str, Position]]:
    """
    Candidate moves that survive one step, in DIRECTION_ORDER.

    Filter out moves that:
    1. Reverse the current heading
    2. Leave the grid (walls mode only)
    3. Land on any body segment other than the head

    Returns:
        List of (direction, new_head) tuples.
    """
    candidates = []
    for direction in DIRECTION_ORDER:
        if direction == OPPOSITE_DIRECTIONS[player_state.direction]:
            continue

        new_head = next_head(
            player_state.head, direction, player_state.mode, player_state.grid_size
        )
        if new_head is None:
            continue

        if check_self_collision(new_head, player_state.snake):
            continue

        candidates.append((direction, new_head))

    return candidates
