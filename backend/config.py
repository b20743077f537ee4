"""
Runtime configuration.

Values come from the environment (a local .env file is loaded first).
Game rule constants live in domain/constants.py, not here.
"""

import os

from dotenv import load_dotenv

from domain.constants import GRID_SIZE

load_dotenv()


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _get_int(name: str, default):
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


GRID = _get_int("SNAKE_GRID_SIZE", GRID_SIZE)
WATCH_TICK_MS = _get_int("SNAKE_WATCH_TICK_MS", 200)
AUTO_TICK = _get_bool("SNAKE_AUTO_TICK", True)
START_WATCH = _get_bool("SNAKE_START_WATCH", True)
SEED_DEMO_DATA = _get_bool("SNAKE_SEED_DEMO_DATA", True)
RANDOM_SEED = _get_int("SNAKE_RANDOM_SEED", None)
WATCH_PLAYER_VARIANT = os.getenv("SNAKE_WATCH_PLAYER", "greedy")
# Idle or finished game sessions untouched this long are dropped; 0 keeps them forever
SESSION_TTL_SECONDS = _get_int("SNAKE_SESSION_TTL_SECONDS", 3600)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = _get_int("PORT", 5000)

# Allowed origins can be configured via CORS_ALLOWED_ORIGINS env var (comma-separated)
_allowed_origins_env = os.getenv("CORS_ALLOWED_ORIGINS")
if _allowed_origins_env:
    CORS_ALLOWED_ORIGINS = [o.strip() for o in _allowed_origins_env.split(",") if o.strip()]
else:
    # sensible defaults for local dev
    CORS_ALLOWED_ORIGINS = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]


def as_dict() -> dict:
    """Settings in the shape create_app() expects for app.config."""
    return {
        "GRID_SIZE": GRID,
        "WATCH_TICK_MS": WATCH_TICK_MS,
        "AUTO_TICK": AUTO_TICK,
        "START_WATCH": START_WATCH,
        "SEED_DEMO_DATA": SEED_DEMO_DATA,
        "RANDOM_SEED": RANDOM_SEED,
        "WATCH_PLAYER_VARIANT": WATCH_PLAYER_VARIANT,
        "SESSION_TTL_SECONDS": SESSION_TTL_SECONDS,
        "CORS_ALLOWED_ORIGINS": CORS_ALLOWED_ORIGINS,
    }
