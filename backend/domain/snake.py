"""
Grid geometry for a snake body.

A snake is a sequence of (x, y) cells from the head at index 0 to the tail
at the end. These helpers are shared by the rules engine and the players so
that both move and collide the same way.
"""

from typing import Optional, Sequence, Tuple

from .constants import DIRECTION_VECTORS, PASS_THROUGH

Position = Tuple[int, int]


def step(head: Position, direction: str) -> Position:
    """Return the cell one step from head in the given direction (unbounded)."""
    dx, dy = DIRECTION_VECTORS[direction]
    return (head[0] + dx, head[1] + dy)


def wrap_position(position: Position, grid_size: int) -> Position:
    x, y = position
    return (x % grid_size, y % grid_size)


def is_out_of_bounds(position: Position, grid_size: int) -> bool:
    x, y = position
    return x < 0 or x >= grid_size or y < 0 or y >= grid_size


def next_head(
    head: Position,
    direction: str,
    mode: str,
    grid_size: int
) -> Optional[Position]:
    """
    Compute where the head lands after one step, applying the mode's boundary rule.

    Returns:
        The new head, wrapped in pass-through mode, or None when a walls-mode
        move leaves the grid.
    """
    candidate = step(head, direction)
    if mode == PASS_THROUGH:
        return wrap_position(candidate, grid_size)
    if is_out_of_bounds(candidate, grid_size):
        return None
    return candidate


def check_self_collision(head: Position, snake: Sequence[Position]) -> bool:
    """True if head lands on any segment other than the current head slot."""
    return any(segment == head for segment in list(snake)[1:])


def advance_body(
    snake: Sequence[Position],
    new_head: Position,
    grow: bool
) -> Tuple[Position, ...]:
    """Prepend new_head; keep the tail when growing, otherwise drop it."""
    body = (new_head,) + tuple(snake)
    if grow:
        return body
    return body[:-1]
