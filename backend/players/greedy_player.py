"""
Greedy player - one-step lookahead towards the food.

Used to drive the simulated players shown in watch mode. Movement, wrapping,
collision and food placement all come from ``domain`` so a simulated game
plays by the same rules as a human one.
"""

import random
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from domain.constants import FOOD_POINTS, RIGHT
from domain.game_state import ActivePlayer
from domain.rules import generate_food, initial_snake
from domain.snake import Position, advance_body, check_self_collision, next_head
from .base import Player, safe_moves


def manhattan_distance(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


class GreedyPlayer(Player):
    """
    Picks the safe move whose new head is closest (Manhattan) to the food.

    Ties keep the first direction in DIRECTION_ORDER. With no safe move the
    current heading is returned.
    """

    def get_move(self, player_state: ActivePlayer) -> str:
        best_direction = player_state.direction
        min_distance = None

        for direction, new_head in safe_moves(player_state):
            distance = manhattan_distance(new_head, player_state.food)
            if min_distance is None or distance < min_distance:
                min_distance = distance
                best_direction = direction

        return best_direction


def respawn_player(
    player_state: ActivePlayer,
    rng: Optional[random.Random] = None
) -> ActivePlayer:
    """Start the simulated player over: centred snake, zero score, new food."""
    snake = initial_snake(player_state.grid_size)
    return replace(
        player_state,
        snake=snake,
        food=generate_food(snake, player_state.grid_size, rng),
        direction=RIGHT,
        score=0,
        started_at=datetime.now(timezone.utc),
    )


def simulate_player_move(
    player_state: ActivePlayer,
    rng: Optional[random.Random] = None,
    agent: Optional[Player] = None
) -> ActivePlayer:
    """
    Advance a simulated player by one tick.

    The agent chooses the heading. If the chosen move is fatal (only possible
    when the agent is cornered) the player respawns instead of dying.
    """
    agent = agent or GreedyPlayer()
    direction = agent.get_move(player_state)

    new_head = next_head(
        player_state.head, direction, player_state.mode, player_state.grid_size
    )
    if new_head is None or check_self_collision(new_head, player_state.snake):
        return respawn_player(player_state, rng)

    ate_food = new_head == player_state.food
    new_snake = advance_body(player_state.snake, new_head, grow=ate_food)

    if ate_food:
        return replace(
            player_state,
            snake=new_snake,
            direction=direction,
            score=player_state.score + FOOD_POINTS,
            food=generate_food(new_snake, player_state.grid_size, rng),
        )

    return replace(player_state, snake=new_snake, direction=direction)
