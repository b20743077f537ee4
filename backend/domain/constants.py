"""
Game constants for the snake engine.
"""

# Movement directions
UP = "UP"
DOWN = "DOWN"
LEFT = "LEFT"
RIGHT = "RIGHT"
VALID_MOVES = {UP, DOWN, LEFT, RIGHT}

# Fixed evaluation order used wherever directions are scanned
DIRECTION_ORDER = (UP, DOWN, LEFT, RIGHT)

OPPOSITE_DIRECTIONS = {
    UP: DOWN,
    DOWN: UP,
    LEFT: RIGHT,
    RIGHT: LEFT,
}

# Screen coordinates: (0, 0) is the top left cell, UP => y - 1
DIRECTION_VECTORS = {
    UP: (0, -1),
    DOWN: (0, 1),
    LEFT: (-1, 0),
    RIGHT: (1, 0),
}

# Game modes
WALLS = "walls"
PASS_THROUGH = "pass-through"
VALID_MODES = {WALLS, PASS_THROUGH}

SCORE_MULTIPLIERS = {
    WALLS: 1.5,
    PASS_THROUGH: 1.0,
}

# Game status
IDLE = "idle"
PLAYING = "playing"
PAUSED = "paused"
GAME_OVER = "game-over"

# Game settings
GRID_SIZE = 20
INITIAL_SPEED = 150  # ms between ticks
MIN_SPEED = 50
SPEED_STEP = 2
FOOD_POINTS = 10
INITIAL_LENGTH = 3
FALLBACK_FOOD = (0, 0)
