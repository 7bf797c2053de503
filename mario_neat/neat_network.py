# neat_network.py

from typing import Dict, List, Sequence, Tuple

import numpy as np
from scipy.special import expit

from mario_neat.errors import PreconditionViolation
from mario_neat.neat_genome import ConnectionGene, Genome


class NEATNetwork:
    """
    Feed-forward network built from a genome.

    Hidden nodes are evaluated in increasing id order, then the output nodes.
    This relies on mutation only ever connecting a hidden node to nodes that
    are computed before it.
    """

    def __init__(self, genome: Genome):
        self.genome = genome
        # Gather enabled connections grouped by their destination node
        self.incoming: Dict[int, List[ConnectionGene]] = {}
        for conn in genome.enabled_connections():
            self.incoming.setdefault(conn.tgt, []).append(conn)
        self.values = np.zeros(len(genome.nodes))

    def _activate_node(self, values: np.ndarray, nid: int):
        conns = self.incoming.get(nid)
        if not conns:
            return  # no enabled input: keeps 0.0
        s = sum(values[conn.src] * conn.weight for conn in conns)
        values[nid] = expit(s)

    def activate(self, inputs: Sequence[float]) -> Tuple[float, ...]:
        """Returns the activations of the output nodes, each in [0, 1]."""
        if len(inputs) != self.genome.num_inputs:
            raise PreconditionViolation(
                f"Input vector size {len(inputs)} does not match {self.genome.num_inputs} input nodes."
            )

        values = np.zeros(len(self.genome.nodes))
        values[:self.genome.num_inputs] = np.asarray(inputs, dtype=float)

        for nid in self.genome.hidden_ids:
            self._activate_node(values, nid)
        for nid in self.genome.output_ids:
            self._activate_node(values, nid)

        self.values = values
        return tuple(float(values[nid]) for nid in self.genome.output_ids)


def evaluate(genome: Genome, inputs: Sequence[float]) -> Tuple[float, ...]:
    return NEATNetwork(genome).activate(inputs)
