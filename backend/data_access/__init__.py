"""
Data access layer for the snake game's mock backend.

This module provides the in-memory store and the repositories for users,
leaderboard entries and simulated players.
"""

from .store import MemoryStore, create_store, generate_simulated_player, seed_demo_data
from .repositories import (
    BaseRepository,
    LeaderboardRepository,
    PlayerRepository,
    UserRepository,
)

__all__ = [
    'MemoryStore',
    'create_store',
    'generate_simulated_player',
    'seed_demo_data',
    'BaseRepository',
    'LeaderboardRepository',
    'PlayerRepository',
    'UserRepository',
]
