"""
Registry for autonomous player variants.

Maps variant keys (e.g., 'greedy', 'random') to player classes. To add a new
variant, create a module with a Player subclass, import it here, and add an
entry to PLAYER_VARIANTS.
"""

from typing import Dict, List, Optional, Type

from .base import Player
from .greedy_player import GreedyPlayer
from .random_player import RandomPlayer


DEFAULT_VARIANT = "greedy"

PLAYER_VARIANTS: Dict[str, Type[Player]] = {
    "greedy": GreedyPlayer,
    "random": RandomPlayer,
}

# Canonical list of available variant keys (for API exposure)
AVAILABLE_VARIANTS = list(PLAYER_VARIANTS.keys())


def get_player_class(variant_key: Optional[str] = None) -> Type[Player]:
    """
    Get the player class for a given variant key.

    Args:
        variant_key: One of 'greedy', 'random'. If None or empty, returns the default.

    Returns:
        The player class (subclass of Player).

    Raises:
        ValueError: If variant_key is not recognized.
    """
    if not variant_key or variant_key.strip() == "":
        variant_key = DEFAULT_VARIANT

    variant_key = variant_key.strip().lower()

    if variant_key not in PLAYER_VARIANTS:
        available = ", ".join(AVAILABLE_VARIANTS)
        raise ValueError(
            f"Unknown player variant '{variant_key}'. Available variants: {available}"
        )

    return PLAYER_VARIANTS[variant_key]


def list_variants() -> List[dict]:
    """
    Return metadata about all available player variants.

    Returns:
        List of dicts with 'key' and 'description' for each variant.
    """
    return [
        {"key": "greedy", "description": "Moves towards the food, avoiding walls and its own body"},
        {"key": "random", "description": "Picks any move that avoids walls and its own body"},
    ]
