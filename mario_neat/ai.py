import logging
import time
from dataclasses import dataclass
from typing import Callable

import numpy as np

from mario_neat.episode import EpisodeController, EpisodeState
from mario_neat.errors import ApiMisuse
from mario_neat.game_state import GameSnapshot
from mario_neat.neat_config import DEFAULT_EPISODE_CONFIG, DEFAULT_NEAT_CONFIG, EpisodeConfig, NeatConfig
from mario_neat.neat_network import NEATNetwork
from mario_neat.population import FitnessReport, Population
from mario_neat.tiles import as_nn_input

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Inputs:
    steer_right: bool = False
    action: bool = False


class Ai:
    """
    Couples the population with the trial of its current genome.
    All calls are expected from a single frame-driven loop.
    """

    def __init__(self, neat_config: NeatConfig = DEFAULT_NEAT_CONFIG,
                 episode_config: EpisodeConfig = DEFAULT_EPISODE_CONFIG,
                 clock: Callable[[], float] = time.monotonic,
                 rng=None, population: Population = None):
        self.neat_config = neat_config
        self.episode_config = episode_config
        self.clock = clock
        self.population = population if population is not None else Population(neat_config, rng)
        self._start_episode()

    def _start_episode(self):
        self.episode = EpisodeController(self.episode_config, self.clock)
        self.network = NEATNetwork(self.population.current_genome())

    def advance_episode(self, snapshot: GameSnapshot):
        self.episode.update(snapshot)

    def episode_outcome(self) -> EpisodeState:
        return self.episode.state

    def current_inputs(self) -> Inputs:
        right_value, action_value = self.network.activate(as_nn_input(self.episode.screen))
        threshold = self.neat_config.output_threshold
        return Inputs(steer_right=right_value > threshold, action=action_value > threshold)

    def advance_population(self) -> bool:
        """
        Record the finished episode and move to the next genome.
        Returns True when this started a new generation.
        """
        if self.episode.state == EpisodeState.PLAYING:
            raise ApiMisuse("advance_population() called while the episode is still playing")
        fitness = self.episode.fitness()
        logger.debug(f"Genome {self.population.cursor} {self.episode.state.value}, fitness {fitness:.2f}")
        new_generation = self.population.next_individual(fitness)
        self._start_episode()
        return new_generation

    def fitness_report(self) -> FitnessReport:
        return self.population.report()

    def tile_window(self) -> np.ndarray:
        """Read-only copy of the current tile window."""
        screen = self.episode.screen.copy()
        screen.setflags(write=False)
        return screen
