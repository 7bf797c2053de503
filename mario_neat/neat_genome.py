import logging
import random
from enum import Enum
from typing import Dict, List, Set

from mario_neat.neat_config import INPUT_NODES, OUTPUT_NODES

logger = logging.getLogger(__name__)


# Define node types for neural network genes: input, hidden, output
class NodeType(str, Enum):
    INPUT = "input"
    HIDDEN = "hidden"
    OUTPUT = "output"


# NodeGene represents a single neuron in the network; its id is its index in the genome
class NodeGene:
    def __init__(self, id: int, type: NodeType):
        self.id = id
        self.type = type

    def __repr__(self):
        return f"NodeGene(id={self.id}, type={self.type.value})"


# ConnectionGene represents a connection/gene between two neurons in the network
class ConnectionGene:
    def __init__(self, src: int, tgt: int, weight: float, enabled: bool, innovation: int):
        self.src = src  # Source node id
        self.tgt = tgt  # Target node id
        self.weight = weight  # Connection weight
        self.enabled = enabled  # Whether the connection is enabled
        self.innovation = innovation  # Unique innovation number

    def copy(self) -> "ConnectionGene":
        return ConnectionGene(self.src, self.tgt, self.weight, self.enabled, self.innovation)

    def __repr__(self):
        return (
            f"ConnGene({self.src}->{self.tgt}, w={self.weight:.3f}, "
            f"{'on' if self.enabled else 'off'}, innov={self.innovation})"
        )


class Genome:
    """
    Append-only genetic encoding of a network.

    Nodes are laid out as [inputs][outputs][hidden...] and are never removed, so a
    node id is also its index. Connections are never removed either; mutation only
    disables them so they stay available for alignment during crossover.
    """

    def __init__(self, num_inputs: int = INPUT_NODES, num_outputs: int = OUTPUT_NODES):
        self.num_inputs = num_inputs
        self.num_outputs = num_outputs
        self.nodes: List[NodeGene] = []
        self.connections: List[ConnectionGene] = []
        self.fitness = 0.0

        for _ in range(num_inputs):
            self.add_node(NodeType.INPUT)
        for _ in range(num_outputs):
            self.add_node(NodeType.OUTPUT)

    @property
    def first_hidden(self) -> int:
        return self.num_inputs + self.num_outputs

    @property
    def output_ids(self) -> range:
        return range(self.num_inputs, self.first_hidden)

    @property
    def hidden_ids(self) -> range:
        return range(self.first_hidden, len(self.nodes))

    def add_node(self, type: NodeType) -> int:
        """Append a node and return its id."""
        node = NodeGene(len(self.nodes), type)
        self.nodes.append(node)
        return node.id

    def add_connection(self, src: int, tgt: int, weight: float, innovation: int, enabled: bool = True):
        """Add a connection between nodes with a weight and innovation id."""
        self.connections.append(ConnectionGene(src, tgt, weight, enabled, innovation))

    def enabled_connections(self) -> List[ConnectionGene]:
        return [c for c in self.connections if c.enabled]

    def innovations(self) -> Set[int]:
        return {c.innovation for c in self.connections}

    def genes_by_innovation(self) -> Dict[int, ConnectionGene]:
        return {c.innovation: c for c in self.connections}

    def max_innovation(self) -> int:
        return max((c.innovation for c in self.connections), default=0)

    def _reaches(self, start: int, goal: int) -> bool:
        """True if goal can be reached from start following enabled connections."""
        adjacency: Dict[int, List[int]] = {}
        for conn in self.enabled_connections():
            adjacency.setdefault(conn.src, []).append(conn.tgt)
        stack, seen = [start], set()
        while stack:
            node = stack.pop()
            if node == goal:
                return True
            if node in seen:
                continue
            seen.add(node)
            stack.extend(adjacency.get(node, []))
        return False

    def mutate_add_connection(self, innovation: int, rng=random) -> int:
        """
        Connect a random input/hidden node to a random output/hidden node.

        A hidden destination must come after the source and must not already lead
        back to it, so enabled connections never form a cycle. Output nodes are
        always acceptable destinations, which guarantees the re-roll terminates.
        Returns the advanced innovation counter.
        """
        sources = [node.id for node in self.nodes if node.type != NodeType.OUTPUT]
        src = rng.choice(sources)
        while True:
            tgt = rng.randrange(self.num_inputs, len(self.nodes))
            if self.nodes[tgt].type == NodeType.OUTPUT:
                break
            if tgt > src and not self._reaches(tgt, src):
                break

        innovation += 1
        self.add_connection(src, tgt, 1.0, innovation)
        logger.debug(f"Added connection {src}->{tgt} (innov={innovation})")
        return innovation

    def mutate_add_node(self, innovation: int, rng=random) -> int:
        """Split a random enabled connection with a new hidden node."""
        enabled_conns = self.enabled_connections()
        if not enabled_conns:
            logger.debug("add_node skipped: genome has no enabled connection")
            return innovation
        conn = rng.choice(enabled_conns)
        conn.enabled = False

        new_node_id = self.add_node(NodeType.HIDDEN)
        # Both new connections start at 1.0; the split connection's weight is not carried over.
        self.add_connection(conn.src, new_node_id, 1.0, innovation + 1)
        self.add_connection(new_node_id, conn.tgt, 1.0, innovation + 2)
        logger.debug(f"Split {conn.src}->{conn.tgt} with node {new_node_id}")
        return innovation + 2

    def mutate_change_weight(self, innovation: int, rng=random,
                             min_weight: float = -2.0, max_weight: float = 2.0) -> int:
        """Reassign the weight of a random enabled connection uniformly in [min_weight, max_weight)."""
        enabled_conns = self.enabled_connections()
        if not enabled_conns:
            logger.debug("change_weight skipped: genome has no enabled connection")
            return innovation
        conn = rng.choice(enabled_conns)
        conn.weight = min_weight + (max_weight - min_weight) * rng.random()
        return innovation

    def copy(self) -> "Genome":
        """Create a deep copy (clone) of the current genome."""
        clone = Genome(self.num_inputs, self.num_outputs)
        for _ in self.hidden_ids:
            clone.add_node(NodeType.HIDDEN)
        clone.connections = [conn.copy() for conn in self.connections]
        clone.fitness = self.fitness
        return clone

    def __repr__(self):
        return f"Genome(nodes={len(self.nodes)}, conns={len(self.connections)}, fitness={self.fitness:.2f})"


def make_genome(max_innovation_number: int, rng=random,
                num_inputs: int = INPUT_NODES, num_outputs: int = OUTPUT_NODES) -> Genome:
    """
    Create a minimal genome: all input and output nodes plus two random
    input->output connections numbered max_innovation_number + 1 and + 2.
    The caller is responsible for advancing its own innovation counter.
    """
    genome = Genome(num_inputs, num_outputs)
    for offset in (1, 2):
        src = rng.randrange(num_inputs)
        tgt = num_inputs + rng.randrange(num_outputs)
        genome.add_connection(src, tgt, 1.0, max_innovation_number + offset)
    return genome
