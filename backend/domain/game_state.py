"""
GameState entity - a snapshot of the game at a point in time.

Snapshots are immutable. Every transition in ``domain.rules`` returns a new
snapshot built with ``dataclasses.replace`` and never edits the one it was
given, so whoever owns the current snapshot is the only writer.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Tuple

from .constants import GRID_SIZE, IDLE, INITIAL_SPEED, PLAYING, RIGHT, WALLS
from .snake import Position


def render_board(
    snake: Iterable[Position],
    food: Position,
    grid_size: int
) -> str:
    """
    Returns a string representation of the board with:
    . = empty space
    F = food
    H = snake head
    o = snake body
    (0,0) is the top left cell, y grows downwards.
    """
    board = [['.' for _ in range(grid_size)] for _ in range(grid_size)]

    fx, fy = food
    if 0 <= fx < grid_size and 0 <= fy < grid_size:
        board[fy][fx] = 'F'

    for pos_idx, (x, y) in enumerate(snake):
        if not (0 <= x < grid_size and 0 <= y < grid_size):
            continue
        board[y][x] = 'H' if pos_idx == 0 else 'o'

    result = []
    for y in range(grid_size):
        result.append(f"{y:2d} {' '.join(board[y])}")

    # x-axis labels use the last digit so wide boards stay aligned
    result.append("   " + " ".join(str(i % 10) for i in range(grid_size)))

    return "\n".join(result)


def _positions_to_list(positions: Iterable[Position]) -> list:
    return [{"x": x, "y": y} for x, y in positions]


@dataclass(frozen=True)
class GameState:
    """
    A snapshot of a single player's game.

    Attributes:
        snake: tuple of (x, y), head first
        food: (x, y) of the only food item
        direction: heading committed on the last successful tick
        next_direction: heading queued for the next tick
        score: raw score (10 per food, no mode multiplier)
        high_score: best score seen this session
        status: one of idle, playing, paused, game-over
        mode: walls or pass-through
        grid_size: board is grid_size x grid_size
        speed: milliseconds between ticks
    """

    snake: Tuple[Position, ...]
    food: Position
    direction: str = RIGHT
    next_direction: str = RIGHT
    score: int = 0
    high_score: int = 0
    status: str = IDLE
    mode: str = WALLS
    grid_size: int = GRID_SIZE
    speed: int = INITIAL_SPEED

    @property
    def head(self) -> Position:
        """Return the head position (first element)."""
        return self.snake[0]

    def print_board(self) -> str:
        return render_board(self.snake, self.food, self.grid_size)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "snake": _positions_to_list(self.snake),
            "food": {"x": self.food[0], "y": self.food[1]},
            "direction": self.direction,
            "next_direction": self.next_direction,
            "score": self.score,
            "high_score": self.high_score,
            "status": self.status,
            "mode": self.mode,
            "grid_size": self.grid_size,
            "speed": self.speed,
        }

    def __repr__(self):
        return (
            f"<GameState status={self.status}, mode={self.mode}, "
            f"length={len(self.snake)}, food={self.food}, score={self.score}>"
        )


@dataclass(frozen=True)
class ActivePlayer:
    """
    A simulated player shown in watch mode.

    Always implicitly playing; it has no pause, status or high score and is
    moved by a ``players`` agent instead of user input.
    """

    id: str
    username: str
    score: int
    mode: str
    snake: Tuple[Position, ...]
    food: Position
    direction: str = RIGHT
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    grid_size: int = GRID_SIZE

    @property
    def head(self) -> Position:
        return self.snake[0]

    def print_board(self) -> str:
        return render_board(self.snake, self.food, self.grid_size)

    def as_game_state(self) -> GameState:
        """View this player as a playing GameState, e.g. for a shared renderer."""
        return GameState(
            snake=self.snake,
            food=self.food,
            direction=self.direction,
            next_direction=self.direction,
            score=self.score,
            status=PLAYING,
            mode=self.mode,
            grid_size=self.grid_size,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "score": self.score,
            "mode": self.mode,
            "snake": _positions_to_list(self.snake),
            "food": {"x": self.food[0], "y": self.food[1]},
            "direction": self.direction,
            "started_at": self.started_at.isoformat(),
            "grid_size": self.grid_size,
        }

    def __repr__(self):
        return (
            f"<ActivePlayer id={self.id}, username={self.username}, "
            f"mode={self.mode}, score={self.score}>"
        )
