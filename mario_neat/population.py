# population.py
"""
Population management: the species pool, the evaluation cursor over it and the
generation transition (cull, prune, breed, mutate) that runs when the cursor wraps.
"""

import logging
import random
from dataclasses import dataclass
from typing import List

import numpy as np
from deap import base, tools

from mario_neat.errors import PreconditionViolation
from mario_neat.neat_config import DEFAULT_NEAT_CONFIG, NeatConfig
from mario_neat.neat_genome import Genome, make_genome
from mario_neat.neat_operators import crossover, max_innovation, mutate
from mario_neat.species import Species, is_same_species

logger = logging.getLogger(__name__)


def adjusted_fitness(fitness: float, species_size: int, config: NeatConfig = DEFAULT_NEAT_CONFIG) -> float:
    """Share fitness across a species; species smaller than the threshold count as size 1."""
    if species_size < config.fitness_sharing_threshold:
        species_size = 1
    return fitness / species_size


@dataclass
class FitnessReport:
    last_fitness: float
    generation: int
    max_fitness: float
    species_index: int
    individual_index: int
    species_count: int
    population_size: int


class EvaluationCursor:
    """Walks the pool species by species, member by member, in a fixed order."""

    def __init__(self):
        self.species_index = 0
        self.individual_index = 0

    def reset(self):
        self.species_index = 0
        self.individual_index = 0

    def current(self, pool: List[Species]) -> Genome:
        if not pool:
            raise PreconditionViolation("Population has no species")
        species = pool[self.species_index]
        if not species.members:
            raise PreconditionViolation(f"Species {species.id} has no members")
        return species.members[self.individual_index]

    def advance(self, pool: List[Species]) -> bool:
        """Move to the next genome. Returns True when the last genome of the last species was passed."""
        if not pool:
            raise PreconditionViolation("Population has no species")
        if self.individual_index < pool[self.species_index].size() - 1:
            self.individual_index += 1
            return False
        if self.species_index < len(pool) - 1:
            self.species_index += 1
            self.individual_index = 0
            return False
        self.reset()
        return True

    def __repr__(self):
        return f"EvaluationCursor({self.species_index}, {self.individual_index})"


class Population:
    def __init__(self, config: NeatConfig = DEFAULT_NEAT_CONFIG, rng=None):
        self.config = config
        self.rng = rng if rng is not None else random.Random(config.random_seed)

        self.pool: List[Species] = [
            Species(0, [make_genome(0, self.rng)]),
            Species(1, [make_genome(3, self.rng)]),
        ]
        self._last_species_id = 1
        self.generation = 0
        self.max_fitness = 0.0
        self.last_fitness = 0.0
        self.cursor = EvaluationCursor()

        # Operators share the population's rng so a seeded run is reproducible
        self.toolbox = base.Toolbox()
        self.toolbox.register("mate", crossover, rng=self.rng)
        self.toolbox.register("mutate", mutate, rng=self.rng, config=self.config)

        self.stats = tools.Statistics(lambda genome: genome.fitness)
        self.stats.register("avg", np.mean)
        self.stats.register("max", np.max)
        self.stats.register("min", np.min)
        self.logbook = tools.Logbook()
        self.logbook.header = ["gen", "species", "size", "max", "avg", "min"]

    def genomes(self) -> List[Genome]:
        return [genome for species in self.pool for genome in species.members]

    def population(self) -> int:
        return sum(species.size() for species in self.pool)

    def current_genome(self) -> Genome:
        return self.cursor.current(self.pool)

    def current_species(self) -> Species:
        self.cursor.current(self.pool)
        return self.pool[self.cursor.species_index]

    def record_fitness(self, fitness: float):
        """Store an episode's fitness on the current genome, shared across its species."""
        species = self.current_species()
        genome = self.current_genome()
        genome.fitness = adjusted_fitness(fitness, species.size(), self.config)
        self.last_fitness = genome.fitness

    def next_individual(self, fitness: float) -> bool:
        """Record fitness for the current genome and move on; returns True if a new generation started."""
        self.record_fitness(fitness)
        if self.cursor.advance(self.pool):
            self.next_generation()
            return True
        return False

    def add_to_pool(self, genome: Genome):
        """Place the genome in the first compatible species or found a new one."""
        for species in self.pool:
            if is_same_species(genome, species.representative, self.config):
                species.members.append(genome)
                return
        self._last_species_id += 1
        self.pool.append(Species(self._last_species_id, [genome]))

    def report(self) -> FitnessReport:
        return FitnessReport(
            last_fitness=self.last_fitness,
            generation=self.generation,
            max_fitness=self.max_fitness,
            species_index=self.cursor.species_index,
            individual_index=self.cursor.individual_index,
            species_count=len(self.pool),
            population_size=self.population(),
        )

    # ----------------------------
    # Generation transition
    # ----------------------------

    def update_max_fitness(self):
        genomes = self.genomes()
        if not genomes:
            raise PreconditionViolation("Population is empty")
        self.max_fitness = max(genome.fitness for genome in genomes)

    def sort_species(self):
        for species in self.pool:
            species.sort()

    def cull_species(self):
        for species in self.pool:
            species.cull()

    def remove_stale_species(self):
        """Drop species that stopped improving, never the one holding the best genome."""
        for species in self.pool:
            species.update_staleness()
        max_fitness = self.max_fitness
        self.pool = [
            species for species in self.pool
            if species.staleness < self.config.max_staleness
            or species.top_fitness == max_fitness
            or species.members[0].fitness == max_fitness
        ]

    def remove_weak_species(self):
        self.pool.sort(key=lambda species: species.members[0].fitness, reverse=True)
        self.pool = self.pool[:self.config.max_species // 2]

    def cross_over_within_species(self):
        for species in self.pool:
            if species.size() < 2:
                continue
            children = [
                self.toolbox.mate(*self.rng.sample(species.members, 2))
                for _ in range(species.size())
            ]
            species.members.extend(children)

    def cross_over_between_species(self):
        children_needed = self.config.population_size - self.population()
        for _ in range(max(0, children_needed)):
            if len(self.pool) >= 2:
                species1, species2 = self.rng.sample(self.pool, 2)
            else:
                species1 = species2 = self.pool[0]
            child = self.toolbox.mate(
                self.rng.choice(species1.members), self.rng.choice(species2.members)
            )
            self.add_to_pool(child)

    def mutate(self):
        innovation = max_innovation(self.genomes())
        for genome in self.genomes():
            if self.rng.random() < self.config.mutation_rate:
                innovation = self.toolbox.mutate(genome, innovation)

    def next_generation(self):
        record = self.stats.compile(self.genomes())
        self.logbook.record(gen=self.generation, species=len(self.pool), size=self.population(), **record)

        self.update_max_fitness()
        self.sort_species()
        self.cull_species()
        self.remove_stale_species()
        if len(self.pool) > self.config.max_species:
            self.remove_weak_species()
        self.cross_over_within_species()
        self.cross_over_between_species()
        self.mutate()
        self.generation += 1
        self.cursor.reset()

        logger.info(
            f"Generation {self.generation}: population={self.population()}, "
            f"species={len(self.pool)}, max fitness={self.max_fitness:.2f}"
        )
