import random

from mario_neat.neat_genome import make_genome
from mario_neat.neat_operators import crossover, max_innovation, mutate


def make_parents(seed=0):
    rng = random.Random(seed)
    fitter = make_genome(0, rng)
    weaker = fitter.copy()
    innovation = weaker.mutate_add_node(2, rng)  # weaker-only innovations 3, 4
    fitter.mutate_add_connection(innovation, rng)  # fitter-only innovation 5
    fitter.fitness = 10.0
    weaker.fitness = 1.0
    return fitter, weaker


def test_child_never_inherits_weaker_only_genes():
    fitter, weaker = make_parents()
    rng = random.Random(1)
    for _ in range(20):
        child = crossover(weaker, fitter, rng)
        assert child.innovations() == fitter.innovations()
        assert 3 not in child.innovations() and 4 not in child.innovations()


def test_child_takes_fitter_topology():
    fitter, weaker = make_parents()
    child = crossover(fitter, weaker, random.Random(2))
    assert len(child.nodes) == len(fitter.nodes)
    assert child.fitness == 0.0
    for conn in child.connections:
        assert conn.src < len(child.nodes)
        assert conn.tgt < len(child.nodes)


def test_tie_prefers_first_parent():
    fitter, weaker = make_parents()
    weaker.fitness = fitter.fitness
    child = crossover(weaker, fitter, random.Random(3))
    assert child.innovations() == weaker.innovations()
    assert len(child.nodes) == len(weaker.nodes)


def test_matching_genes_come_from_either_parent():
    fitter, weaker = make_parents()
    for conn in fitter.connections:
        conn.weight = 1.5
    for conn in weaker.connections:
        conn.weight = -1.5

    rng = random.Random(4)
    seen = set()
    for _ in range(40):
        child = crossover(fitter, weaker, rng)
        seen.add(child.genes_by_innovation()[1].weight)
        # disjoint gene always from the fitter parent
        assert child.genes_by_innovation()[5].weight == 1.5
    assert seen == {1.5, -1.5}


def test_crossover_copies_genes():
    fitter, weaker = make_parents()
    child = crossover(fitter, weaker, random.Random(5))
    child.connections[0].weight = 99.0
    assert all(conn.weight != 99.0 for conn in fitter.connections + weaker.connections)


def test_mutate_threads_counter():
    rng = random.Random(6)
    genome = make_genome(0, rng)
    innovation = 2
    for _ in range(100):
        new_innovation = mutate(genome, innovation, rng)
        assert new_innovation - innovation in (0, 1, 2)
        innovation = new_innovation
    assert max_innovation([genome]) == innovation
    innovations = [conn.innovation for conn in genome.connections]
    assert len(innovations) == len(set(innovations))


def test_max_innovation():
    rng = random.Random(7)
    assert max_innovation([]) == 0
    assert max_innovation([make_genome(0, rng), make_genome(10, rng)]) == 12
