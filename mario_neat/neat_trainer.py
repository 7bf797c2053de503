import logging
import os
from typing import Callable, List, Optional, Protocol

from tqdm import tqdm

from mario_neat.ai import Ai, Inputs
from mario_neat.episode import EpisodeState
from mario_neat.game_state import GameSnapshot
from mario_neat.neat_config import NeatConfigManager
from mario_neat.neat_genome import Genome
from mario_neat.utils import setup_logging
from mario_neat.visualize_neat import plot_fitness_curve, plot_genome, plot_structure_stats, screen_message

logger = logging.getLogger(__name__)


class GameEnvironment(Protocol):
    """The emulator side of the loop. Each read_snapshot() call is one frame."""

    def read_snapshot(self) -> GameSnapshot: ...

    def apply_inputs(self, inputs: Inputs) -> None: ...

    def reload(self) -> None: ...

    def shutdown_requested(self) -> bool: ...


def best_genome(ai: Ai) -> Genome:
    return max(ai.population.genomes(), key=lambda genome: genome.fitness)


def run(environment: GameEnvironment, ai: Ai, generations: int,
        stop_on_success: bool = True,
        dashboard: Optional[Callable[[str], None]] = None) -> List[Genome]:
    """
    Drive the agent frame by frame until `generations` generations have passed,
    a genome finishes the level, or the environment asks to shut down.
    Returns a copy of the best genome of each completed generation.
    """
    genome_history = []
    with tqdm(total=generations, desc="NEAT Generations") as pbar:
        while ai.population.generation < generations:
            if environment.shutdown_requested():
                logger.info("Shutdown requested")
                break

            outcome = ai.episode_outcome()
            if outcome == EpisodeState.SUCCEEDED and stop_on_success:
                logger.info(f"AI succeeded with fitness {ai.episode.fitness():.2f}")
                break
            if outcome != EpisodeState.PLAYING:
                logger.debug(f"AI {outcome.value} so reset")
                if ai.advance_population():
                    genome_history.append(best_genome(ai).copy())
                    pbar.update(1)
                environment.reload()
                continue

            ai.advance_episode(environment.read_snapshot())
            environment.apply_inputs(ai.current_inputs())
            if dashboard is not None:
                dashboard(screen_message(ai.tile_window()))

    return genome_history


def train(environment: GameEnvironment, generations: int, config_file: str = "config.properties",
          dashboard: Optional[Callable[[str], None]] = None) -> Ai:
    manager = NeatConfigManager(config_file)
    output_dir = manager.files_config.output
    setup_logging(output_dir)

    ai = Ai(manager.neat_config, manager.episode_config)
    genome_history = run(environment, ai, generations, dashboard=dashboard)

    report = ai.fitness_report()
    logger.info(f"Finished at generation {report.generation}, max fitness {report.max_fitness:.2f}")
    if len(ai.population.logbook):
        plot_fitness_curve(ai.population.logbook, filename=os.path.join(output_dir, "neat_fitness.png"))
    if genome_history:
        plot_structure_stats(genome_history, filename=os.path.join(output_dir, "structure_stats.png"))
    plot_genome(best_genome(ai), filename=os.path.join(output_dir, "best_genome.png"),
                title=f"Best genome, generation {report.generation}")
    return ai
