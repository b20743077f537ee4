"""
Domain entities and rules for the snake game engine.

This module contains the core game logic that is independent of
infrastructure concerns (storage, HTTP, timers, etc.).
"""

from .constants import (
    UP, DOWN, LEFT, RIGHT, VALID_MOVES, DIRECTION_ORDER,
    OPPOSITE_DIRECTIONS, DIRECTION_VECTORS,
    WALLS, PASS_THROUGH, VALID_MODES,
    IDLE, PLAYING, PAUSED, GAME_OVER,
    GRID_SIZE, INITIAL_SPEED, MIN_SPEED, SPEED_STEP, FOOD_POINTS,
)
from .game_state import GameState, ActivePlayer
from .rules import (
    create_initial_state,
    generate_food,
    is_valid_direction_change,
    set_direction,
    move_snake,
    start_game,
    pause_game,
    resume_game,
    toggle_pause,
    reset_game,
    set_game_mode,
    get_score_multiplier,
    calculate_final_score,
)

__all__ = [
    'UP', 'DOWN', 'LEFT', 'RIGHT', 'VALID_MOVES', 'DIRECTION_ORDER',
    'OPPOSITE_DIRECTIONS', 'DIRECTION_VECTORS',
    'WALLS', 'PASS_THROUGH', 'VALID_MODES',
    'IDLE', 'PLAYING', 'PAUSED', 'GAME_OVER',
    'GRID_SIZE', 'INITIAL_SPEED', 'MIN_SPEED', 'SPEED_STEP', 'FOOD_POINTS',
    'GameState',
    'ActivePlayer',
    'create_initial_state',
    'generate_food',
    'is_valid_direction_change',
    'set_direction',
    'move_snake',
    'start_game',
    'pause_game',
    'resume_game',
    'toggle_pause',
    'reset_game',
    'set_game_mode',
    'get_score_multiplier',
    'calculate_final_score',
]
