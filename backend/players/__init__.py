"""
Player implementations for the snake game.

This module contains the autonomous player abstractions and the
implementations that steer simulated snakes in watch mode.
"""

from .base import Player, safe_moves
from .greedy_player import GreedyPlayer, simulate_player_move, respawn_player
from .random_player import RandomPlayer
from .variant_registry import get_player_class, list_variants, AVAILABLE_VARIANTS

__all__ = [
    'Player',
    'safe_moves',
    'GreedyPlayer',
    'RandomPlayer',
    'simulate_player_move',
    'respawn_player',
    'get_player_class',
    'list_variants',
    'AVAILABLE_VARIANTS',
]
