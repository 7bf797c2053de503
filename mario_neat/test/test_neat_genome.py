import random
from collections import defaultdict

from mario_neat.neat_config import INPUT_NODES, OUTPUT_NODES
from mario_neat.neat_genome import Genome, NodeType, make_genome


def has_enabled_cycle(genome):
    # Kahn's algorithm over the enabled connections
    successors = defaultdict(list)
    indegree = defaultdict(int)
    for conn in genome.enabled_connections():
        successors[conn.src].append(conn.tgt)
        indegree[conn.tgt] += 1
    ready = [node.id for node in genome.nodes if indegree[node.id] == 0]
    visited = 0
    while ready:
        node = ready.pop()
        visited += 1
        for nxt in successors[node]:
            indegree[nxt] -= 1
            if indegree[nxt] == 0:
                ready.append(nxt)
    return visited != len(genome.nodes)


def test_make_genome_layout():
    genome = make_genome(7, random.Random(1))
    assert len(genome.nodes) == INPUT_NODES + OUTPUT_NODES
    assert all(node.type == NodeType.INPUT for node in genome.nodes[:INPUT_NODES])
    assert all(node.type == NodeType.OUTPUT for node in genome.nodes[INPUT_NODES:])
    assert [node.id for node in genome.nodes] == list(range(len(genome.nodes)))
    assert genome.fitness == 0.0


def test_make_genome_connects_inputs_to_outputs():
    genome = make_genome(7, random.Random(2))
    assert [conn.innovation for conn in genome.connections] == [8, 9]
    for conn in genome.connections:
        assert 0 <= conn.src < INPUT_NODES
        assert conn.tgt in genome.output_ids
        assert conn.weight == 1.0
        assert conn.enabled


def test_add_node_splits_connection():
    genome = Genome(3, 2)
    genome.add_connection(0, 3, 0.7, 1)
    innovation = genome.mutate_add_node(1, random.Random(0))

    assert innovation == 3
    assert genome.connections[0].enabled is False
    assert len(genome.nodes) == 6
    assert genome.nodes[5].type == NodeType.HIDDEN
    first, second = genome.connections[1:]
    assert (first.src, first.tgt, first.weight, first.innovation) == (0, 5, 1.0, 2)
    assert (second.src, second.tgt, second.weight, second.innovation) == (5, 3, 1.0, 3)


def test_add_node_without_enabled_connection_is_noop():
    genome = Genome(3, 2)
    genome.add_connection(0, 3, 1.0, 1, enabled=False)
    assert genome.mutate_add_node(10, random.Random(0)) == 10
    assert len(genome.nodes) == 5
    assert len(genome.connections) == 1


def test_change_weight_stays_in_range():
    rng = random.Random(3)
    genome = make_genome(0, rng)
    for _ in range(200):
        assert genome.mutate_change_weight(2, rng) == 2
        for conn in genome.connections:
            assert -2.0 <= conn.weight < 2.0


def test_change_weight_without_enabled_connection_is_noop():
    genome = Genome(2, 1)
    assert genome.mutate_change_weight(4, random.Random(0)) == 4


def test_add_connection_targets():
    rng = random.Random(4)
    genome = make_genome(0, rng)
    innovation = 2
    for _ in range(50):
        innovation = genome.mutate_add_connection(innovation, rng)
        conn = genome.connections[-1]
        assert conn.innovation == innovation
        assert genome.nodes[conn.src].type != NodeType.OUTPUT
        assert genome.nodes[conn.tgt].type != NodeType.INPUT
        assert conn.weight == 1.0 and conn.enabled
    assert innovation == 52


def test_structural_mutations_never_create_cycles():
    for seed in range(10):
        rng = random.Random(seed)
        genome = make_genome(0, rng)
        innovation = 2
        for _ in range(60):
            if rng.random() < 0.5:
                innovation = genome.mutate_add_node(innovation, rng)
            else:
                innovation = genome.mutate_add_connection(innovation, rng)
            assert not has_enabled_cycle(genome)


def test_copy_is_independent():
    genome = make_genome(0, random.Random(5))
    genome.mutate_add_node(2, random.Random(5))
    genome.fitness = 12.0
    clone = genome.copy()

    assert [n.type for n in clone.nodes] == [n.type for n in genome.nodes]
    assert clone.innovations() == genome.innovations()
    assert clone.fitness == 12.0

    clone.connections[0].weight = -1.5
    assert genome.connections[0].weight != -1.5
