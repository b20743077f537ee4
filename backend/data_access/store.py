"""
In-memory store backing the mock user, leaderboard and watch-list data.

One MemoryStore is created per process (see create_store) and handed to the
repositories that need it. Nothing here is a module-level global.
"""

import copy
import random
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from domain.constants import GRID_SIZE, PASS_THROUGH, RIGHT, WALLS
from domain.game_state import ActivePlayer
from domain.rules import generate_food, initial_snake


class MemoryStore:
    """
    Holds every collection of the mock backend.

    Attributes:
        users: user_id -> user dict (id, username, email, created_at)
        password_hashes: user_id -> werkzeug password hash
        sessions: token -> user_id
        leaderboard: list of entry dicts (id, username, score, mode, date)
        active_players: player_id -> ActivePlayer, in insertion order
        lock: guards all of the above
    """

    def __init__(self):
        self.users: Dict[str, Dict[str, Any]] = {}
        self.password_hashes: Dict[str, str] = {}
        self.sessions: Dict[str, str] = {}
        self.leaderboard: List[Dict[str, Any]] = []
        self.active_players: Dict[str, ActivePlayer] = {}
        self.lock = threading.RLock()

    def snapshot(self) -> Dict[str, Any]:
        """Copy every collection so a failed transaction can be undone."""
        return {
            "users": copy.deepcopy(self.users),
            "password_hashes": dict(self.password_hashes),
            "sessions": dict(self.sessions),
            "leaderboard": copy.deepcopy(self.leaderboard),
            # ActivePlayer is frozen, a shallow copy is enough
            "active_players": dict(self.active_players),
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        self.users = snapshot["users"]
        self.password_hashes = snapshot["password_hashes"]
        self.sessions = snapshot["sessions"]
        self.leaderboard = snapshot["leaderboard"]
        self.active_players = snapshot["active_players"]

    def __repr__(self):
        return (
            f"<MemoryStore users={len(self.users)}, "
            f"leaderboard={len(self.leaderboard)}, "
            f"active_players={len(self.active_players)}>"
        )


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


DEMO_USERS = [
    {"id": "1", "username": "SnakeMaster", "email": "snake@example.com", "created_at": _utc(2024, 1, 1)},
    {"id": "2", "username": "NeonGamer", "email": "neon@example.com", "created_at": _utc(2024, 2, 15)},
]

DEMO_LEADERBOARD = [
    {"id": "1", "username": "SnakeMaster", "score": 2500, "mode": WALLS, "date": _utc(2024, 12, 1)},
    {"id": "2", "username": "NeonGamer", "score": 2100, "mode": WALLS, "date": _utc(2024, 12, 5)},
    {"id": "3", "username": "PixelPro", "score": 1850, "mode": PASS_THROUGH, "date": _utc(2024, 12, 3)},
    {"id": "4", "username": "RetroKing", "score": 1720, "mode": WALLS, "date": _utc(2024, 12, 2)},
    {"id": "5", "username": "ArcadeQueen", "score": 1650, "mode": PASS_THROUGH, "date": _utc(2024, 12, 4)},
    {"id": "6", "username": "CyberSnake", "score": 1500, "mode": WALLS, "date": _utc(2024, 12, 6)},
    {"id": "7", "username": "GlowWorm", "score": 1420, "mode": PASS_THROUGH, "date": _utc(2024, 12, 1)},
    {"id": "8", "username": "NightCrawler", "score": 1350, "mode": WALLS, "date": _utc(2024, 12, 5)},
    {"id": "9", "username": "ElectricEel", "score": 1280, "mode": PASS_THROUGH, "date": _utc(2024, 12, 3)},
    {"id": "10", "username": "GridRunner", "score": 1200, "mode": WALLS, "date": _utc(2024, 12, 2)},
]

DEMO_PLAYERS = [
    ("active-1", "LivePlayer1", WALLS),
    ("active-2", "StreamSnake", PASS_THROUGH),
    ("active-3", "ProGamer99", WALLS),
]

# Simulated players join with a head start of up to this many points / seconds
MAX_START_SCORE = 500
MAX_START_AGE_SECONDS = 300


def generate_simulated_player(
    player_id: str,
    username: str,
    mode: str,
    grid_size: int = GRID_SIZE,
    rng: Optional[random.Random] = None
) -> ActivePlayer:
    """Build a simulated player mid-game: centred snake heading RIGHT, random score and age."""
    rng = rng or random
    snake = initial_snake(grid_size)
    started_at = datetime.now(timezone.utc) - timedelta(
        seconds=rng.randrange(MAX_START_AGE_SECONDS)
    )
    return ActivePlayer(
        id=player_id,
        username=username,
        score=rng.randrange(MAX_START_SCORE),
        mode=mode,
        snake=snake,
        food=generate_food(snake, grid_size, rng),
        direction=RIGHT,
        started_at=started_at,
        grid_size=grid_size,
    )


def seed_demo_data(
    store: MemoryStore,
    grid_size: int = GRID_SIZE,
    rng: Optional[random.Random] = None
) -> None:
    with store.lock:
        for user in DEMO_USERS:
            store.users[user["id"]] = dict(user)
        store.leaderboard.extend(dict(entry) for entry in DEMO_LEADERBOARD)
        for player_id, username, mode in DEMO_PLAYERS:
            store.active_players[player_id] = generate_simulated_player(
                player_id, username, mode, grid_size=grid_size, rng=rng
            )


def create_store(
    seed: bool = True,
    grid_size: int = GRID_SIZE,
    rng: Optional[random.Random] = None
) -> MemoryStore:
    """Create the process-wide store, optionally loaded with demo data."""
    store = MemoryStore()
    if seed:
        seed_demo_data(store, grid_size=grid_size, rng=rng)
    return store
