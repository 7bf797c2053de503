import logging
import time
from enum import Enum
from typing import Callable, Optional

import numpy as np

from mario_neat.game_state import GameSnapshot
from mario_neat.neat_config import DEFAULT_EPISODE_CONFIG, EpisodeConfig, SCREEN_SIZE
from mario_neat.tiles import Tile, tile_window

logger = logging.getLogger(__name__)


class EpisodeState(str, Enum):
    PLAYING = "playing"
    STUCK = "stuck"
    DEAD = "dead"
    SUCCEEDED = "succeeded"


class EpisodeController:
    """
    Tracks one trial of a genome from the game's per-frame snapshots.

    Starts in PLAYING; STUCK, DEAD and SUCCEEDED are terminal and ignore further ticks.
    """

    def __init__(self, config: EpisodeConfig = DEFAULT_EPISODE_CONFIG,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config
        self.clock = clock

        self.game_state: Optional[GameSnapshot] = None
        self.previous_game_state: Optional[GameSnapshot] = None
        self.screen = np.full((SCREEN_SIZE, SCREEN_SIZE), Tile.NOTHING, dtype=np.int8)
        self.state = EpisodeState.PLAYING

        self.start = clock()
        self.end: Optional[float] = None
        self.last_x = 0
        self.last_x_update = self.start

    @property
    def is_terminal(self) -> bool:
        return self.state != EpisodeState.PLAYING

    def update(self, snapshot: GameSnapshot):
        """Feed one frame's snapshot."""
        if self.is_terminal:
            return
        self.previous_game_state = self.game_state if self.game_state is not None else snapshot
        self.game_state = snapshot
        self.screen = tile_window(snapshot)

        if self.game_state != self.previous_game_state:
            logger.debug(str(self.game_state))
        self._update_state()

    def _update_state(self):
        now = self.clock()
        current, previous = self.game_state, self.previous_game_state

        not_moving = (current.agent_x == self.last_x
                      and now - self.last_x_update > self.config.stuck_timeout_s)
        took_too_long = now - self.start > self.config.finish_timeout_s

        if current.lives < previous.lives:
            self.state = EpisodeState.DEAD
        elif current.level > previous.level:
            self.state = EpisodeState.SUCCEEDED
        elif not_moving or took_too_long:
            self.state = EpisodeState.STUCK
        elif current.agent_x != self.last_x:
            self.last_x = current.agent_x
            self.last_x_update = now

        if self.is_terminal:
            self.end = now
            logger.debug(f"Episode ended {self.state.value} at x={current.agent_x} after {now - self.start:.2f}s")

    def elapsed(self) -> float:
        end = self.end if self.end is not None else self.clock()
        return end - self.start

    def fitness(self) -> float:
        """Progress per second, plus a bonus for finishing the level."""
        # Sub-second episodes count as one second
        elapsed = max(1.0, self.elapsed())
        position = self.game_state.agent_x if self.game_state is not None else 0
        bonus = self.config.success_bonus if self.state == EpisodeState.SUCCEEDED else 0.0
        return position / elapsed + bonus
