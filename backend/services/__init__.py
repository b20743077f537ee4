"""
Services built on the domain rules and the data access layer.
"""

from .errors import AuthError, NotFoundError
from .auth_service import AuthService
from .leaderboard_service import LeaderboardService
from .game_session import GameSession, SessionManager
from .watch_service import WatchService
from .ticker import Ticker

__all__ = [
    'AuthError',
    'NotFoundError',
    'AuthService',
    'LeaderboardService',
    'GameSession',
    'SessionManager',
    'WatchService',
    'Ticker',
]
