import random

import pytest

from scheduler_opt.algorithms import run_algorithm, schedule_fcfs
from scheduler_opt.builder import average_waiting_time, build_schedule
from scheduler_opt.config import AnnealingConfig, ColonyConfig, GeneticConfig, OptimizerConfig, SwarmConfig
from scheduler_opt.models import Process
from scheduler_opt import optimizers
from scheduler_opt.optimizers import (
    Particle,
    _deposit,
    _move,
    _update_velocity,
    ant_colony,
    burst_similarity,
    genetic_algorithm,
    order_crossover,
    particle_swarm,
    permutation_distance,
    simulated_annealing,
)

SMALL = OptimizerConfig(
    genetic=GeneticConfig(population_size=12, generations=15),
    swarm=SwarmConfig(particles=8, iterations=10),
    colony=ColonyConfig(ants=6, iterations=10),
    annealing=AnnealingConfig(initial_temperature=10, cooling_rate=0.8, iterations_per_temperature=5),
)

SEARCHES = [
    (genetic_algorithm, SMALL.genetic),
    (particle_swarm, SMALL.swarm),
    (ant_colony, SMALL.colony),
    (simulated_annealing, SMALL.annealing),
]


def _procs():
    # Long job first in arrival order, so FCFS is far from optimal.
    return [
        Process("P1", arrival_time=0, burst_time=10),
        Process("P2", arrival_time=0, burst_time=1),
        Process("P3", arrival_time=1, burst_time=2),
        Process("P4", arrival_time=2, burst_time=1),
        Process("P5", arrival_time=3, burst_time=6),
        Process("P6", arrival_time=3, burst_time=3),
    ]


@pytest.mark.parametrize("search, config", SEARCHES)
def test_never_worse_than_fcfs(search, config):
    procs = _procs()
    fcfs = schedule_fcfs(procs)
    outcome = search(procs, config, random.Random(7))
    assert outcome.fitness <= fcfs.average_waiting_time + 1e-9


@pytest.mark.parametrize("search, config", SEARCHES)
def test_returns_valid_permutation(search, config):
    procs = _procs()
    outcome = search(procs, config, random.Random(3))
    assert sorted(outcome.order) == list(range(len(procs)))
    assert outcome.fitness == pytest.approx(average_waiting_time(procs, outcome.order))
    assert outcome.schedule.scheduled == build_schedule(procs, outcome.order).scheduled


@pytest.mark.parametrize("search, config", SEARCHES)
def test_same_seed_same_outcome(search, config):
    procs = _procs()
    first = search(procs, config, random.Random(42))
    second = search(procs, config, random.Random(42))
    assert first.order == second.order
    assert first.fitness == second.fitness


@pytest.mark.parametrize("search, config", SEARCHES)
def test_single_process(search, config):
    procs = [Process("only", arrival_time=1, burst_time=2)]
    outcome = search(procs, config, random.Random(0))
    assert outcome.order == [0]
    assert outcome.fitness == 0


@pytest.mark.parametrize("alg", ["ga", "pso", "aco", "sa"])
def test_run_algorithm_seeded_results_match(alg):
    a = run_algorithm(alg, _procs(), config=SMALL, seed=5)
    b = run_algorithm(alg, _procs(), config=SMALL, seed=5)
    assert a == b
    assert len(a.scheduled_processes) == len(_procs())
    assert a.average_response_time is None


def test_ga_finds_sjf_like_order_on_simultaneous_arrivals():
    procs = [Process(f"P{i}", arrival_time=0, burst_time=b) for i, b in enumerate([7, 3, 9, 1, 5])]
    outcome = genetic_algorithm(procs, GeneticConfig(population_size=10, generations=5), random.Random(1))
    # The burst-sorted seed is already optimal when everything arrives at once.
    assert [procs[i].burst_time for i in outcome.order] == [1, 3, 5, 7, 9]


def test_order_crossover_keeps_segment_and_fills_from_other_parent():
    rng = random.Random(11)
    parent_a = [0, 1, 2, 3, 4, 5]
    parent_b = [5, 4, 3, 2, 1, 0]
    for _ in range(20):
        child = order_crossover(parent_a, parent_b, rng)
        assert sorted(child) == parent_a
        kept = [i for i, idx in enumerate(child) if idx == parent_a[i]]
        assert len(kept) >= 2
        rest = [idx for i, idx in enumerate(child) if i not in kept]
        assert rest == [idx for idx in parent_b if idx in rest]


def test_permutation_distance():
    assert permutation_distance([0, 1, 2], [0, 1, 2]) == 0
    assert permutation_distance([0, 1, 2], [0, 2, 1]) == 2


def test_burst_similarity_matrix():
    procs = [Process("A", 0, 1), Process("B", 0, 3)]
    matrix = burst_similarity(procs)
    assert matrix[0][0] == 0
    assert matrix[0][1] == pytest.approx(1 / 3)
    assert matrix[1][0] == matrix[0][1]


def test_aco_handles_zero_fitness_tours():
    procs = [Process("A", 0, 1), Process("B", 5, 1), Process("C", 10, 1)]
    outcome = ant_colony(procs, ColonyConfig(ants=4, iterations=3), random.Random(2))
    assert outcome.fitness == 0


def test_invalid_config_rejected():
    with pytest.raises(ValueError):
        genetic_algorithm(_procs(), GeneticConfig(population_size=0))
    with pytest.raises(ValueError):
        simulated_annealing(_procs(), AnnealingConfig(cooling_rate=1.5))


class _FixedRandom(random.Random):
    def random(self):
        return 0.5


def test_deposit_closes_tour_when_enabled():
    pheromone = [[0.0] * 3 for _ in range(3)]
    _deposit(pheromone, [2, 0, 1], 5.0, close_tour=True)
    assert pheromone[2][0] == 5.0
    assert pheromone[0][1] == 5.0
    assert pheromone[1][2] == 5.0
    assert sum(map(sum, pheromone)) == 15.0


def test_deposit_leaves_closing_edge_when_disabled():
    pheromone = [[0.0] * 3 for _ in range(3)]
    _deposit(pheromone, [2, 0, 1], 5.0, close_tour=False)
    assert pheromone[1][2] == 0.0
    assert sum(map(sum, pheromone)) == 10.0


def test_aco_without_closing_edge_still_beats_fcfs():
    procs = _procs()
    config = ColonyConfig(ants=6, iterations=10, close_tour=False)
    outcome = ant_colony(procs, config, random.Random(7))
    assert outcome.fitness <= schedule_fcfs(procs).average_waiting_time + 1e-9


def test_velocity_update_combines_inertia_and_distances():
    particle = Particle(position=[0, 1, 2], velocity=[0.1, 0.2, 0.3], best_position=[0, 2, 1], best_fitness=0.0)
    config = SwarmConfig(inertia=0.7, cognitive=1.5, social=1.5)
    _update_velocity(particle, [2, 1, 0], config, _FixedRandom())
    # both distances are 2, r1 = r2 = 0.5
    assert particle.velocity == pytest.approx([0.07 + 3, 0.14 + 3, 0.21 + 3])


def test_move_with_zero_velocity_keeps_position():
    position = [3, 1, 0, 2]
    assert _move(position, [0.0] * 4, random.Random(1)) == position


def test_move_with_high_velocity_swaps_but_stays_a_permutation():
    position = [3, 1, 0, 2]
    rng = random.Random(4)
    moved = [_move(position, [1.0] * 4, rng) for _ in range(10)]
    assert position == [3, 1, 0, 2]
    assert all(sorted(m) == [0, 1, 2, 3] for m in moved)
    assert any(m != position for m in moved)


def test_annealing_returns_best_visited_not_last(monkeypatch):
    seen = []

    def recording_fitness(processes, order):
        fitness = average_waiting_time(processes, order)
        seen.append(fitness)
        return fitness

    monkeypatch.setattr(optimizers, "average_waiting_time", recording_fitness)
    # Hot and short: almost every neighbour is accepted, so the walk drifts.
    config = AnnealingConfig(initial_temperature=1000, cooling_rate=0.5, min_temperature=100, iterations_per_temperature=10)
    outcome = simulated_annealing(_procs(), config, random.Random(9))

    assert len(seen) == 1 + 4 * 10
    assert outcome.fitness == min(seen)
