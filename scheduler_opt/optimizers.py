"""
Search-based schedulers.

Each strategy explores permutations of process indices and scores a
candidate by the average waiting time of the schedule it produces
(see ``builder.average_waiting_time``). They all run for a fixed budget
and return the best ordering seen, never just the last one visited.

All search state lives inside a single call; randomness comes from the
``rng`` argument so that a seeded ``random.Random`` gives repeatable runs.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .builder import Schedule, arrival_order, average_waiting_time, build_schedule, burst_order
from .config import AnnealingConfig, ColonyConfig, GeneticConfig, SwarmConfig
from .models import Process

logger = logging.getLogger(__name__)

Order = List[int]

# Lower bound on fitness when turning it into a pheromone deposit.
_MIN_FITNESS = 1e-6


@dataclass
class SearchOutcome:
    order: Order
    fitness: float
    schedule: Schedule = field(repr=False, default_factory=Schedule)


def _outcome(processes: Sequence[Process], order: Order) -> SearchOutcome:
    schedule = build_schedule(processes, order)
    return SearchOutcome(order=list(order), fitness=schedule.average_waiting_time, schedule=schedule)


def _swap_two(order: Order, rng: random.Random) -> Order:
    """
    Copy of ``order`` with two distinct random positions exchanged.
    """
    result = list(order)
    i, j = rng.sample(range(len(result)), 2)
    result[i], result[j] = result[j], result[i]
    return result


# ---------------------------------------------------------------------------
# Genetic algorithm
# ---------------------------------------------------------------------------


def _tournament(evaluated: List[Tuple[Order, float]], size: int, rng: random.Random) -> Order:
    contestants = [rng.choice(evaluated) for _ in range(size)]
    return min(contestants, key=lambda item: item[1])[0]


def order_crossover(parent_a: Order, parent_b: Order, rng: random.Random) -> Order:
    """
    Keep a random contiguous segment of ``parent_a`` in place and fill the
    other positions with the remaining indices in ``parent_b``'s order.
    """
    size = len(parent_a)
    if size < 2:
        return list(parent_a)

    start = rng.randrange(size - 1)
    end = rng.randint(start + 1, size - 1)

    child: List[Optional[int]] = [None] * size
    child[start:end + 1] = parent_a[start:end + 1]
    taken = set(parent_a[start:end + 1])

    filler = (idx for idx in parent_b if idx not in taken)
    for pos in range(size):
        if child[pos] is None:
            child[pos] = next(filler)

    return child  # type: ignore[return-value]


def genetic_algorithm(
    processes: Sequence[Process],
    config: Optional[GeneticConfig] = None,
    rng: Optional[random.Random] = None,
) -> SearchOutcome:
    """
    Evolve orderings with tournament selection, order crossover and swap
    mutation. The best member of each generation is carried over unchanged.
    """
    config = config or GeneticConfig()
    config.validate()
    rng = rng or random.Random()

    n = len(processes)
    base = arrival_order(processes)
    if n == 0:
        return _outcome(processes, base)

    population: List[Order] = [base, burst_order(processes)]
    while len(population) < config.population_size:
        population.append(rng.sample(base, n))
    population = population[: config.population_size]

    best: Optional[Tuple[Order, float]] = None

    for gen in range(config.generations):
        evaluated = [(member, average_waiting_time(processes, member)) for member in population]
        gen_best = min(evaluated, key=lambda item: item[1])

        if best is None or gen_best[1] < best[1]:
            best = gen_best
            logger.debug("GA generation %d: new best fitness %.4f", gen, best[1])

        next_population: List[Order] = [gen_best[0]]
        while len(next_population) < config.population_size:
            parent_a = _tournament(evaluated, config.tournament_size, rng)
            parent_b = _tournament(evaluated, config.tournament_size, rng)
            child = order_crossover(parent_a, parent_b, rng)
            if n > 1 and rng.random() < config.mutation_rate:
                child = _swap_two(child, rng)
            next_population.append(child)

        population = next_population

    assert best is not None
    return _outcome(processes, best[0])


# ---------------------------------------------------------------------------
# Particle swarm optimization
# ---------------------------------------------------------------------------


@dataclass
class Particle:
    position: Order
    velocity: List[float]
    best_position: Order
    best_fitness: float


def permutation_distance(a: Sequence[int], b: Sequence[int]) -> int:
    """
    Number of positions at which two orderings differ.
    """
    return sum(1 for x, y in zip(a, b) if x != y)


def _update_velocity(particle: Particle, global_position: Order, config: SwarmConfig, rng: random.Random) -> None:
    d_personal = permutation_distance(particle.position, particle.best_position)
    d_global = permutation_distance(particle.position, global_position)

    for i in range(len(particle.velocity)):
        r1 = rng.random()
        r2 = rng.random()
        particle.velocity[i] = (
            config.inertia * particle.velocity[i]
            + config.cognitive * r1 * d_personal
            + config.social * r2 * d_global
        )


def _move(position: Order, velocity: Sequence[float], rng: random.Random) -> Order:
    """
    Swap each position with a random one, with probability given by its velocity.
    """
    n = len(position)
    moved = list(position)
    for i in range(n):
        if rng.random() < velocity[i]:
            j = rng.randrange(n)
            moved[i], moved[j] = moved[j], moved[i]
    return moved


def particle_swarm(
    processes: Sequence[Process],
    config: Optional[SwarmConfig] = None,
    rng: Optional[random.Random] = None,
) -> SearchOutcome:
    """
    Discrete PSO over orderings.

    A particle's velocity holds one value per position, used as the
    probability of swapping that position with a random other one. Velocity
    grows with the particle's distance from its personal and the global best.
    """
    config = config or SwarmConfig()
    config.validate()
    rng = rng or random.Random()

    n = len(processes)
    base = arrival_order(processes)
    if n == 0:
        return _outcome(processes, base)

    swarm: List[Particle] = []
    for i in range(config.particles):
        position = list(base) if i == 0 else rng.sample(base, n)
        velocity = [rng.random() for _ in range(n)]
        fitness = average_waiting_time(processes, position)
        swarm.append(Particle(position, velocity, list(position), fitness))

    leader = min(swarm, key=lambda p: p.best_fitness)
    global_position, global_fitness = list(leader.best_position), leader.best_fitness

    for iteration in range(config.iterations):
        for particle in swarm:
            _update_velocity(particle, global_position, config, rng)
            position = _move(particle.position, particle.velocity, rng)
            particle.position = position

            fitness = average_waiting_time(processes, position)
            if fitness < particle.best_fitness:
                particle.best_position = list(position)
                particle.best_fitness = fitness
                if fitness < global_fitness:
                    global_position, global_fitness = list(position), fitness
                    logger.debug("PSO iteration %d: new best fitness %.4f", iteration, fitness)

    return _outcome(processes, global_position)


# ---------------------------------------------------------------------------
# Ant colony optimization
# ---------------------------------------------------------------------------


def burst_similarity(processes: Sequence[Process]) -> List[List[float]]:
    """
    Static desirability of moving from process i to j: 1 / (1 + |burst_i - burst_j|),
    zero on the diagonal.
    """
    n = len(processes)
    return [
        [0.0 if i == j else 1.0 / (1.0 + abs(processes[i].burst_time - processes[j].burst_time)) for j in range(n)]
        for i in range(n)
    ]


def _construct_tour(
    pheromone: List[List[float]],
    heuristic: List[List[float]],
    config: ColonyConfig,
    rng: random.Random,
) -> Order:
    n = len(pheromone)
    current = rng.randrange(n)
    tour = [current]
    unvisited = [i for i in range(n) if i != current]

    while unvisited:
        weights = [
            (pheromone[current][j] ** config.alpha) * (heuristic[current][j] ** config.beta)
            for j in unvisited
        ]
        total = sum(weights)
        if total > 0:
            threshold = rng.random() * total
            cumulative = 0.0
            choice = unvisited[-1]
            for j, weight in zip(unvisited, weights):
                cumulative += weight
                if threshold <= cumulative:
                    choice = j
                    break
        else:
            choice = rng.choice(unvisited)

        tour.append(choice)
        unvisited.remove(choice)
        current = choice

    return tour


def _deposit(pheromone: List[List[float]], tour: Order, amount: float, close_tour: bool) -> None:
    for a, b in zip(tour, tour[1:]):
        pheromone[a][b] += amount
    if close_tour:
        pheromone[tour[-1]][tour[0]] += amount


def ant_colony(
    processes: Sequence[Process],
    config: Optional[ColonyConfig] = None,
    rng: Optional[random.Random] = None,
) -> SearchOutcome:
    """
    Ant colony search over orderings with a pheromone matrix on ordered pairs.

    Each iteration every ant builds a full ordering by roulette-wheel choice
    weighted by ``pheromone ** alpha * heuristic ** beta``. Pheromone then
    evaporates and each ant deposits ``deposit / fitness`` on the edges it used.
    """
    config = config or ColonyConfig()
    config.validate()
    rng = rng or random.Random()

    n = len(processes)
    base = arrival_order(processes)
    if n == 0:
        return _outcome(processes, base)

    pheromone = [[1.0] * n for _ in range(n)]
    heuristic = burst_similarity(processes)

    best_order, best_fitness = base, average_waiting_time(processes, base)

    for iteration in range(config.iterations):
        tours: List[Tuple[Order, float]] = []
        for _ in range(config.ants):
            tour = _construct_tour(pheromone, heuristic, config, rng)
            fitness = average_waiting_time(processes, tour)
            tours.append((tour, fitness))
            if fitness < best_fitness:
                best_order, best_fitness = tour, fitness
                logger.debug("ACO iteration %d: new best fitness %.4f", iteration, fitness)

        keep = 1.0 - config.evaporation
        for row in pheromone:
            for j in range(n):
                row[j] *= keep

        for tour, fitness in tours:
            _deposit(pheromone, tour, config.deposit / max(fitness, _MIN_FITNESS), config.close_tour)

    return _outcome(processes, best_order)


# ---------------------------------------------------------------------------
# Simulated annealing
# ---------------------------------------------------------------------------


def simulated_annealing(
    processes: Sequence[Process],
    config: Optional[AnnealingConfig] = None,
    rng: Optional[random.Random] = None,
) -> SearchOutcome:
    config = config or AnnealingConfig()
    config.validate()
    rng = rng or random.Random()

    current = arrival_order(processes)
    if len(current) < 2:
        return _outcome(processes, current)

    current_fitness = average_waiting_time(processes, current)
    best, best_fitness = list(current), current_fitness
    temperature = config.initial_temperature

    while temperature > config.min_temperature:
        for _ in range(config.iterations_per_temperature):
            neighbour = _swap_two(current, rng)
            fitness = average_waiting_time(processes, neighbour)
            delta = fitness - current_fitness

            if delta < 0 or rng.random() < math.exp(-delta / temperature):
                current, current_fitness = neighbour, fitness
                if current_fitness < best_fitness:
                    best, best_fitness = list(current), current_fitness
                    logger.debug("SA at T=%.3f: new best fitness %.4f", temperature, best_fitness)

        temperature *= config.cooling_rate

    return _outcome(processes, best)
