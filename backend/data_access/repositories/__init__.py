"""
Repository pattern implementations for data access.

This module provides a clean abstraction over the in-memory store
with proper locking and rollback handling.
"""

from .base import BaseRepository
from .leaderboard_repository import LeaderboardRepository
from .player_repository import PlayerRepository
from .user_repository import UserRepository

__all__ = ['BaseRepository', 'LeaderboardRepository', 'PlayerRepository', 'UserRepository']
