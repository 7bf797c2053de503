from dataclasses import dataclass, field
from typing import Sequence, Tuple

import numpy as np

# Tile buffer: two 256px pages of 13 rows x 16 columns of 16x16 blocks
TILE_PAGES = 2
TILE_ROWS = 13
TILE_COLS = 16
MAX_ENEMIES = 5

# Source for memory addresses: https://datacrystal.romhacking.net/wiki/Super_Mario_Bros.:RAM_map
ADDR_LEVEL_X = 0x6D
ADDR_SCREEN_X = 0x86
ADDR_SCREEN_Y = 0x3B8
ADDR_SCROLL_X = 0x3AD
ADDR_LIVES = 0x75A
ADDR_LEVEL = 0x760
ADDR_TILES = 0x500
ADDR_ENEMY_ACTIVE = 0x0F
ADDR_ENEMY_LEVEL_X = 0x6E
ADDR_ENEMY_SCREEN_X = 0x87
ADDR_ENEMY_SCREEN_Y = 0xCF


def empty_tiles() -> np.ndarray:
    return np.zeros((TILE_PAGES, TILE_ROWS, TILE_COLS), dtype=np.uint8)


@dataclass(frozen=True)
class GameSnapshot:
    """
    One frame of world state read from the game.
    Only the scalar fields take part in equality; the tile buffer and enemy
    list are the raw material for the tile window.
    """
    agent_x: int = 0
    agent_y: int = 0
    screen_x: int = 0
    lives: int = 0
    level: int = 0
    tiles: np.ndarray = field(default_factory=empty_tiles, compare=False, repr=False)
    enemies: Tuple[Tuple[int, int], ...] = field(default=(), compare=False)

    @classmethod
    def from_ram(cls, ram: Sequence[int]) -> "GameSnapshot":
        """Decode a snapshot from the console's 2KB work RAM."""
        ram = np.asarray(ram, dtype=np.uint8)
        agent_x = int(ram[ADDR_LEVEL_X]) * 0x100 + int(ram[ADDR_SCREEN_X])
        agent_y = int(ram[ADDR_SCREEN_Y]) + 16

        tile_count = TILE_PAGES * TILE_ROWS * TILE_COLS
        tiles = ram[ADDR_TILES:ADDR_TILES + tile_count].reshape(TILE_PAGES, TILE_ROWS, TILE_COLS).copy()

        enemies = []
        for slot in range(MAX_ENEMIES):
            if ram[ADDR_ENEMY_ACTIVE + slot] != 0:
                e_x = int(ram[ADDR_ENEMY_LEVEL_X + slot]) * 0x100 + int(ram[ADDR_ENEMY_SCREEN_X + slot])
                e_y = int(ram[ADDR_ENEMY_SCREEN_Y + slot]) + 24
                enemies.append((e_x, e_y))

        return cls(
            agent_x=agent_x,
            agent_y=agent_y,
            screen_x=int(ram[ADDR_SCROLL_X]),
            lives=int(ram[ADDR_LIVES]),
            level=int(ram[ADDR_LEVEL]),
            tiles=tiles,
            enemies=tuple(enemies),
        )

    def __str__(self):
        return (f"Agent coords: ({self.agent_x}, {self.agent_y}). Lives: {self.lives}. "
                f"Screen X: {self.screen_x}. Level: {self.level}")
