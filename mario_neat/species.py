from typing import List

from mario_neat.neat_config import DEFAULT_NEAT_CONFIG, NeatConfig
from mario_neat.neat_genome import Genome


def compatibility_distance(genome1: Genome, genome2: Genome, config: NeatConfig = DEFAULT_NEAT_CONFIG) -> float:
    """
    Structural and weight dissimilarity of two genomes.

    The average weight difference runs over the union of innovations, with a
    missing gene counting as weight 0.0, so disjoint genes also weigh in there.
    """
    n = max(len(genome1.connections), len(genome2.connections))
    if n < config.small_genome_threshold:
        n = 1

    genes1 = genome1.genes_by_innovation()
    genes2 = genome2.genes_by_innovation()
    innovations1, innovations2 = set(genes1), set(genes2)
    disjoint_size = len(innovations1 ^ innovations2)

    union = innovations1 | innovations2
    if union:
        total = 0.0
        for innovation in union:
            w1 = genes1[innovation].weight if innovation in genes1 else 0.0
            w2 = genes2[innovation].weight if innovation in genes2 else 0.0
            total += abs(w1 - w2)
        avg_weight_diff = total / len(union)
    else:
        avg_weight_diff = 0.0

    return (config.disjoint_coefficient * disjoint_size / n
            + config.weight_coefficient * avg_weight_diff)


def is_same_species(genome1: Genome, genome2: Genome, config: NeatConfig = DEFAULT_NEAT_CONFIG) -> bool:
    return compatibility_distance(genome1, genome2, config) < config.compatibility_threshold


class Species:
    """A cluster of compatible genomes, kept sorted best-first by fitness."""

    def __init__(self, id: int, members: List[Genome] = None):
        self.id = id
        self.members: List[Genome] = members if members is not None else []
        self.staleness = 0
        self.top_fitness = 0.0

    def size(self) -> int:
        return len(self.members)

    @property
    def representative(self) -> Genome:
        return self.members[0]

    def sort(self):
        self.members.sort(key=lambda genome: genome.fitness, reverse=True)

    def cull(self):
        """Keep the top half; the fittest member always survives."""
        self.members = self.members[:max(1, len(self.members) // 2)]

    def update_staleness(self):
        current_top_fitness = self.members[0].fitness
        if current_top_fitness > self.top_fitness:
            self.top_fitness = current_top_fitness
            self.staleness = 0
        else:
            self.staleness += 1

    def __repr__(self):
        return f"Species(id={self.id}, size={self.size()}, staleness={self.staleness}, top={self.top_fitness:.2f})"
