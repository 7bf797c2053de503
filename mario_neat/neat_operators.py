# neat_operators.py
"""
Genetic operators: NEAT crossover aligned on innovation numbers and the
single-operator mutation event.
"""

import logging
import random
from typing import Iterable

from mario_neat.neat_config import DEFAULT_NEAT_CONFIG, NeatConfig
from mario_neat.neat_genome import Genome

logger = logging.getLogger(__name__)


def crossover(parent1: Genome, parent2: Genome, rng=random) -> Genome:
    """
    Breed two genomes into a new child.

    Matching genes (same innovation in both parents) are inherited from a random
    parent, disjoint/excess genes only from the fitter one. The child takes the
    fitter parent's nodes, so every inherited gene points at an existing node.
    Ties go to parent1.
    """
    if parent2.fitness > parent1.fitness:
        fitter, weaker = parent2, parent1
    else:
        fitter, weaker = parent1, parent2

    child = fitter.copy()
    child.fitness = 0.0

    weaker_genes = weaker.genes_by_innovation()
    connections = []
    for conn in fitter.connections:
        other = weaker_genes.get(conn.innovation)
        if other is not None and rng.random() < 0.5:
            connections.append(other.copy())
        else:
            connections.append(conn.copy())
    child.connections = connections
    return child


MUTATIONS = ("add_connection", "add_node", "change_weight")


def mutate(genome: Genome, innovation: int, rng=random, config: NeatConfig = DEFAULT_NEAT_CONFIG) -> int:
    """Apply exactly one mutation operator chosen uniformly; returns the advanced innovation counter."""
    kind = rng.choice(MUTATIONS)
    if kind == "add_connection":
        innovation = genome.mutate_add_connection(innovation, rng)
    elif kind == "add_node":
        innovation = genome.mutate_add_node(innovation, rng)
    else:
        innovation = genome.mutate_change_weight(
            innovation, rng, min_weight=config.min_weight, max_weight=config.max_weight
        )
    logger.debug(f"Mutation {kind} applied to {genome}")
    return innovation


def max_innovation(genomes: Iterable[Genome]) -> int:
    """Highest innovation number across every gene of the given genomes."""
    return max((genome.max_innovation() for genome in genomes), default=0)
