import argparse
import json
import logging
import random
from typing import Dict, Optional

import config
from data_access import PlayerRepository, create_store
from domain.constants import GAME_OVER, GRID_SIZE, PASS_THROUGH, PLAYING, WALLS
from domain.game_state import ActivePlayer, GameState
from domain.rules import (
    calculate_final_score,
    create_initial_state,
    move_snake,
    set_direction,
    start_game,
)
from players import Player, get_player_class
from services import WatchService


def as_player_view(state: GameState, username: str = "autoplay") -> ActivePlayer:
    """Let an autonomous player read a GameState."""
    return ActivePlayer(
        id=username,
        username=username,
        score=state.score,
        mode=state.mode,
        snake=state.snake,
        food=state.food,
        direction=state.direction,
        grid_size=state.grid_size,
    )


def run_autoplay(
    mode: str = WALLS,
    grid_size: int = GRID_SIZE,
    max_ticks: int = 1000,
    agent: Optional[Player] = None,
    rng: Optional[random.Random] = None,
    verbose: bool = False
) -> Dict:
    """
    Let an agent play a real game through the same entry points a human uses.

    Each tick the agent picks a heading, it is queued with set_direction and
    applied by move_snake. Unlike watch mode, a fatal move ends the game.

    Returns:
        A dictionary summarizing the game (status, ticks, score, final_score, length).
    """
    agent = agent or get_player_class()()
    state = start_game(create_initial_state(mode, grid_size=grid_size, rng=rng), rng=rng)

    ticks = 0
    while state.status == PLAYING and ticks < max_ticks:
        state = set_direction(state, agent.get_move(as_player_view(state)))
        state = move_snake(state, rng=rng)
        ticks += 1
        if verbose:
            print(f"\nTick {ticks} - score {state.score}")
            print(state.print_board())

    final_score = calculate_final_score(state.score, state.mode)
    if state.status == GAME_OVER:
        print(f"Game Over after {ticks} ticks.")
    else:
        print(f"Stopped after {ticks} ticks (limit reached).")
    print("\n" + state.print_board() + "\n")

    return {
        "status": state.status,
        "mode": state.mode,
        "ticks": ticks,
        "score": state.score,
        "final_score": final_score,
        "length": len(state.snake),
    }


def run_watch(
    ticks: int = 50,
    grid_size: int = GRID_SIZE,
    variant: Optional[str] = None,
    rng: Optional[random.Random] = None,
    verbose: bool = False
) -> Dict:
    """
    Advance the demo simulated players for a number of ticks.

    Returns:
        A dictionary mapping username to score after the last tick.
    """
    store = create_store(seed=True, grid_size=grid_size, rng=rng)
    watch = WatchService(
        PlayerRepository(store),
        agent=get_player_class(variant)(rng),
        rng=rng,
    )

    for tick in range(1, ticks + 1):
        players = watch.step_all()
        if verbose:
            for player in players:
                print(f"\nTick {tick} - {player.username} ({player.mode}) score {player.score}")
                print(player.print_board())

    scores = {player.username: player.score for player in watch.list_players()}
    print(f"Scores after {ticks} ticks: {scores}")
    return scores


def main():
    parser = argparse.ArgumentParser(
        description="Snake game engine: autoplay, watch simulated players, or serve the API."
    )
    parser.add_argument("--seed", type=int, required=False, default=config.RANDOM_SEED,
                        help="Seed for food placement and simulated players")
    parser.add_argument("--grid_size", type=int, required=False, default=config.GRID,
                        help="Board is grid_size x grid_size")
    parser.add_argument("--verbose", action="store_true",
                        help="Print the board after every tick")
    subparsers = parser.add_subparsers(dest="command", required=True)

    play_parser = subparsers.add_parser("play", help="Let an agent play one game")
    play_parser.add_argument("--mode", choices=[WALLS, PASS_THROUGH], default=WALLS)
    play_parser.add_argument("--max_ticks", type=int, default=1000,
                             help="Stop the game after this many ticks")
    play_parser.add_argument("--player", type=str, default=None,
                             help="Player variant (greedy, random)")

    watch_parser = subparsers.add_parser("watch", help="Advance the simulated players")
    watch_parser.add_argument("--ticks", type=int, default=50)
    watch_parser.add_argument("--player", type=str, default=None,
                              help="Player variant (greedy, random)")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--port", type=int, default=config.PORT)

    args = parser.parse_args()

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    rng = random.Random(args.seed) if args.seed is not None else None

    if args.command == "play":
        agent = get_player_class(args.player)(rng)
        result = run_autoplay(
            mode=args.mode,
            grid_size=args.grid_size,
            max_ticks=args.max_ticks,
            agent=agent,
            rng=rng,
            verbose=args.verbose,
        )
        print("\nAutoplay Result Summary:")
        print(json.dumps(result, indent=2))
    elif args.command == "watch":
        run_watch(
            ticks=args.ticks,
            grid_size=args.grid_size,
            variant=args.player,
            rng=rng,
            verbose=args.verbose,
        )
    else:
        from app import create_app

        overrides = {"GRID_SIZE": args.grid_size, "RANDOM_SEED": args.seed}
        create_app(**overrides).run(host="0.0.0.0", port=args.port)


if __name__ == "__main__":
    main()
