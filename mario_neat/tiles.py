# tiles.py
"""
The agent's view of the world: a SCREEN_SIZE x SCREEN_SIZE window of blocks
around the agent, and its encoding as network input.
"""

from enum import IntEnum

import numpy as np

from mario_neat.game_state import TILE_ROWS, TILE_COLS, TILE_PAGES, GameSnapshot
from mario_neat.neat_config import SCREEN_SIZE, VIEW_SIZE

BLOCK_SIZE = 16
PAGE_WIDTH = TILE_COLS * BLOCK_SIZE
TILE_Y_OFFSET = 32  # the tile buffer starts two blocks below the top of the screen


class Tile(IntEnum):
    NOTHING = 0
    BLOCK = 1
    ENEMY = 2
    AGENT = 3


NN_INPUT = {
    Tile.NOTHING: 0.0,
    Tile.AGENT: 0.0,
    Tile.BLOCK: 1.0,
    Tile.ENEMY: -1.0,
}

# The agent sits one row below the centre of its window
AGENT_CELL = (VIEW_SIZE + 1, VIEW_SIZE)


def blocks(offset: int) -> int:
    """Whole blocks in a pixel offset, truncated toward zero."""
    return int(offset / BLOCK_SIZE)


def get_tile(snapshot: GameSnapshot, x: int, y: int) -> Tile:
    """Classify the world position (x, y) using the snapshot's tile buffer."""
    sub_y = blocks(y - TILE_Y_OFFSET)
    if x < 0 or not 0 <= sub_y < TILE_ROWS:
        return Tile.NOTHING
    sub_x = (x % PAGE_WIDTH) // BLOCK_SIZE
    page = (x // PAGE_WIDTH) % TILE_PAGES
    return Tile.BLOCK if snapshot.tiles[page, sub_y, sub_x] != 0 else Tile.NOTHING


def tile_window(snapshot: GameSnapshot) -> np.ndarray:
    """Build the SCREEN_SIZE x SCREEN_SIZE grid of tiles around the agent."""
    screen = np.full((SCREEN_SIZE, SCREEN_SIZE), Tile.NOTHING, dtype=np.int8)
    for i in range(-VIEW_SIZE, VIEW_SIZE + 1):
        y = snapshot.agent_y + i * BLOCK_SIZE - BLOCK_SIZE
        for j in range(-VIEW_SIZE, VIEW_SIZE + 1):
            x = snapshot.agent_x + j * BLOCK_SIZE + 8
            screen[i + VIEW_SIZE, j + VIEW_SIZE] = get_tile(snapshot, x, y)

    for e_x, e_y in snapshot.enemies:
        i = blocks(e_y - snapshot.agent_y) + VIEW_SIZE
        j = blocks(e_x - snapshot.agent_x) + VIEW_SIZE
        if 0 <= i < SCREEN_SIZE and 0 <= j < SCREEN_SIZE:
            screen[i, j] = Tile.ENEMY

    # The agent's own cell always wins over blocks and enemies
    screen[AGENT_CELL] = Tile.AGENT
    return screen


def as_nn_input(screen: np.ndarray) -> np.ndarray:
    """Flatten a tile window row by row into network inputs."""
    lookup = np.array([NN_INPUT[tile] for tile in Tile])
    return lookup[screen.astype(int).ravel()]
