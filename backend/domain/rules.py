"""
Rules engine for a single-player snake game.

Pure transitions over ``GameState`` snapshots. None of these functions raise
for a well-typed state: collisions are ordinary transitions to game-over.
Food placement is the only random step and takes an optional ``rng`` so
callers can pass a seeded ``random.Random``.
"""

import math
import random
from dataclasses import replace
from typing import Iterable, Optional

from .constants import (
    FALLBACK_FOOD,
    FOOD_POINTS,
    GAME_OVER,
    GRID_SIZE,
    IDLE,
    INITIAL_LENGTH,
    INITIAL_SPEED,
    MIN_SPEED,
    OPPOSITE_DIRECTIONS,
    PAUSED,
    PLAYING,
    RIGHT,
    SCORE_MULTIPLIERS,
    SPEED_STEP,
    WALLS,
)
from .game_state import GameState
from .snake import Position, advance_body, check_self_collision, next_head


def initial_snake(grid_size: int = GRID_SIZE) -> tuple:
    """Horizontal snake with its head at the grid centre, body trailing to the left."""
    center = grid_size // 2
    return tuple((center - i, center) for i in range(INITIAL_LENGTH))


def generate_food(
    snake: Iterable[Position],
    grid_size: int,
    rng: Optional[random.Random] = None
) -> Position:
    """
    Pick a uniformly random free cell.

    Returns FALLBACK_FOOD when every cell is occupied.
    """
    rng = rng or random
    occupied = set(snake)
    available = [
        (x, y)
        for x in range(grid_size)
        for y in range(grid_size)
        if (x, y) not in occupied
    ]

    if not available:
        return FALLBACK_FOOD

    return rng.choice(available)


def create_initial_state(
    mode: str = WALLS,
    grid_size: int = GRID_SIZE,
    speed: int = INITIAL_SPEED,
    high_score: int = 0,
    rng: Optional[random.Random] = None
) -> GameState:
    snake = initial_snake(grid_size)
    return GameState(
        snake=snake,
        food=generate_food(snake, grid_size, rng),
        direction=RIGHT,
        next_direction=RIGHT,
        score=0,
        high_score=high_score,
        status=IDLE,
        mode=mode,
        grid_size=grid_size,
        speed=speed,
    )


def is_valid_direction_change(current: str, requested: str) -> bool:
    """Any change except a 180 degree reversal."""
    return OPPOSITE_DIRECTIONS[current] != requested


def set_direction(state: GameState, direction: str) -> GameState:
    """
    Queue a heading for the next tick.

    Only the committed ``direction`` is checked, so repeated calls between
    two ticks overwrite each other (last write wins).
    """
    if state.status != PLAYING:
        return state

    if not is_valid_direction_change(state.direction, direction):
        return state

    return replace(state, next_direction=direction)


def _game_over(state: GameState) -> GameState:
    return replace(
        state,
        status=GAME_OVER,
        high_score=max(state.score, state.high_score),
    )


def move_snake(state: GameState, rng: Optional[random.Random] = None) -> GameState:
    """Advance the game by one tick."""
    if state.status != PLAYING:
        return state

    new_head = next_head(state.head, state.next_direction, state.mode, state.grid_size)

    # Walls mode: left the grid
    if new_head is None:
        return _game_over(state)

    if check_self_collision(new_head, state.snake):
        return _game_over(state)

    ate_food = new_head == state.food
    new_snake = advance_body(state.snake, new_head, grow=ate_food)

    if ate_food:
        return replace(
            state,
            snake=new_snake,
            food=generate_food(new_snake, state.grid_size, rng),
            direction=state.next_direction,
            score=state.score + FOOD_POINTS,
            speed=max(MIN_SPEED, state.speed - SPEED_STEP),
        )

    return replace(
        state,
        snake=new_snake,
        direction=state.next_direction,
    )


def start_game(state: GameState, rng: Optional[random.Random] = None) -> GameState:
    """
    idle/game-over: fresh board marked playing, keeping only the high score.
    paused: resume. playing: unchanged.
    """
    if state.status == PLAYING:
        return state

    if state.status in (IDLE, GAME_OVER):
        fresh = create_initial_state(
            state.mode,
            grid_size=state.grid_size,
            high_score=state.high_score,
            rng=rng,
        )
        return replace(fresh, status=PLAYING)

    return replace(state, status=PLAYING)


def pause_game(state: GameState) -> GameState:
    if state.status != PLAYING:
        return state
    return replace(state, status=PAUSED)


def resume_game(state: GameState) -> GameState:
    if state.status != PAUSED:
        return state
    return replace(state, status=PLAYING)


def toggle_pause(state: GameState) -> GameState:
    if state.status == PLAYING:
        return pause_game(state)
    if state.status == PAUSED:
        return resume_game(state)
    return state


def reset_game(state: GameState, rng: Optional[random.Random] = None) -> GameState:
    """Back to idle from any status; score zeroed, high score kept."""
    return create_initial_state(
        state.mode,
        grid_size=state.grid_size,
        high_score=state.high_score,
        rng=rng,
    )


def set_game_mode(
    state: GameState,
    mode: str,
    rng: Optional[random.Random] = None
) -> GameState:
    """
    Switch mode and rebuild the board. Only accepted in idle or game-over;
    the board is rebuilt even when the mode is unchanged.
    """
    if state.status not in (IDLE, GAME_OVER):
        return state

    return create_initial_state(
        mode,
        grid_size=state.grid_size,
        high_score=state.high_score,
        rng=rng,
    )


def get_score_multiplier(mode: str) -> float:
    return SCORE_MULTIPLIERS.get(mode, 1.0)


def calculate_final_score(score: int, mode: str) -> int:
    """Score reported at game end; the live score is never multiplied."""
    return math.floor(score * get_score_multiplier(mode))
