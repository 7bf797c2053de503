# neat_config.py
"""
Configuration management for the NEAT agent.
Centralizes all configuration access and provides typed access to parameters.
"""

from configparser import ConfigParser
from dataclasses import dataclass
from typing import Optional

# How many blocks the network sees to the left, right, top and bottom of the agent
VIEW_SIZE = 6
SCREEN_SIZE = VIEW_SIZE * 2 + 1
INPUT_NODES = SCREEN_SIZE * SCREEN_SIZE
OUTPUT_NODES = 2  # [right, a]


@dataclass
class NeatConfig:
    """Configuration parameters for population management and the genetic operators."""
    # Population parameters
    population_size: int = 300
    max_species: int = 30
    max_staleness: int = 15

    # Mutation parameters
    mutation_rate: float = 0.2
    min_weight: float = -2.0
    max_weight: float = 2.0

    # Speciation parameters
    compatibility_threshold: float = 3.0
    disjoint_coefficient: float = 0.4
    weight_coefficient: float = 0.1
    small_genome_threshold: int = 20  # genomes below this many genes normalise distance by 1

    # Fitness sharing: species below this size count as size 1
    fitness_sharing_threshold: int = 20

    # Network parameters
    output_threshold: float = 0.5

    random_seed: Optional[int] = None


@dataclass
class EpisodeConfig:
    """Configuration parameters for a single trial of a genome."""
    stuck_timeout_s: float = 2.0
    finish_timeout_s: float = 20.0
    success_bonus: float = 1000.0


@dataclass
class FilesConfig:
    output: str = "output/"


DEFAULT_NEAT_CONFIG = NeatConfig()
DEFAULT_EPISODE_CONFIG = EpisodeConfig()


class NeatConfigManager:
    """
    Centralized configuration management for the NEAT agent.
    Provides typed access to configuration parameters with fallback defaults.
    """

    def __init__(self, config_file: str = "config.properties"):
        self.config = ConfigParser()
        self.config.read(config_file)

        self._neat_config: Optional[NeatConfig] = None
        self._episode_config: Optional[EpisodeConfig] = None
        self._files_config: Optional[FilesConfig] = None

    @property
    def neat_config(self) -> NeatConfig:
        """Get population and operator configuration."""
        if self._neat_config is None:
            self._neat_config = self._load_neat_config()
        return self._neat_config

    @property
    def episode_config(self) -> EpisodeConfig:
        """Get episode configuration."""
        if self._episode_config is None:
            self._episode_config = self._load_episode_config()
        return self._episode_config

    @property
    def files_config(self) -> FilesConfig:
        if self._files_config is None:
            self._files_config = FilesConfig(
                output=self.config.get("FILES", "OUTPUT", fallback=FilesConfig.output)
            )
        return self._files_config

    def _load_neat_config(self) -> NeatConfig:
        """Load NEAT configuration from config file."""
        defaults = DEFAULT_NEAT_CONFIG
        seed = self.config.get("NEAT", "random_seed", fallback="").strip()
        return NeatConfig(
            population_size=self.config.getint("NEAT", "population_size", fallback=defaults.population_size),
            max_species=self.config.getint("NEAT", "max_species", fallback=defaults.max_species),
            max_staleness=self.config.getint("NEAT", "max_staleness", fallback=defaults.max_staleness),
            mutation_rate=self.config.getfloat("NEAT", "mutation_rate", fallback=defaults.mutation_rate),
            min_weight=self.config.getfloat("NEAT", "min_weight", fallback=defaults.min_weight),
            max_weight=self.config.getfloat("NEAT", "max_weight", fallback=defaults.max_weight),
            compatibility_threshold=self.config.getfloat(
                "NEAT", "compatibility_threshold", fallback=defaults.compatibility_threshold),
            disjoint_coefficient=self.config.getfloat(
                "NEAT", "disjoint_coefficient", fallback=defaults.disjoint_coefficient),
            weight_coefficient=self.config.getfloat(
                "NEAT", "weight_coefficient", fallback=defaults.weight_coefficient),
            small_genome_threshold=self.config.getint(
                "NEAT", "small_genome_threshold", fallback=defaults.small_genome_threshold),
            fitness_sharing_threshold=self.config.getint(
                "NEAT", "fitness_sharing_threshold", fallback=defaults.fitness_sharing_threshold),
            output_threshold=self.config.getfloat("NEAT", "output_threshold", fallback=defaults.output_threshold),
            random_seed=int(seed) if seed else None,
        )

    def _load_episode_config(self) -> EpisodeConfig:
        """Load episode configuration from config file."""
        defaults = DEFAULT_EPISODE_CONFIG
        return EpisodeConfig(
            stuck_timeout_s=self.config.getfloat("EPISODE", "stuck_timeout_s", fallback=defaults.stuck_timeout_s),
            finish_timeout_s=self.config.getfloat("EPISODE", "finish_timeout_s", fallback=defaults.finish_timeout_s),
            success_bonus=self.config.getfloat("EPISODE", "success_bonus", fallback=defaults.success_bonus),
        )
