from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import replace
from enum import Enum
from typing import Callable, Deque, Dict, Iterable, List, Optional, Sequence, Union

from . import optimizers
from .builder import arrival_order, build_schedule
from .config import DEFAULT_QUANTUM, OptimizerConfig
from .metrics import build_result
from .models import AlgorithmResult, Process, ScheduledProcess, ScheduledSlice

logger = logging.getLogger(__name__)

# Remaining burst at or below this counts as finished (float drift from slicing).
_REMAINING_TOLERANCE = 1e-9


class AlgorithmId(str, Enum):
    FIRST_COME_FIRST_SERVED = "fcfs"
    SHORTEST_JOB_FIRST = "sjf"
    ROUND_ROBIN = "rr"
    PRIORITY = "priority"
    GENETIC = "ga"
    PARTICLE_SWARM = "pso"
    ANT_COLONY = "aco"
    SIMULATED_ANNEALING = "sa"

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]

    @property
    def is_stochastic(self) -> bool:
        return self in {
            AlgorithmId.GENETIC,
            AlgorithmId.PARTICLE_SWARM,
            AlgorithmId.ANT_COLONY,
            AlgorithmId.SIMULATED_ANNEALING,
        }

    @classmethod
    def parse(cls, value: Union[str, "AlgorithmId"]) -> "AlgorithmId":
        if isinstance(value, AlgorithmId):
            return value
        key = str(value).strip().lower().replace("_", "-")
        if key in _ALIASES:
            return _ALIASES[key]
        raise ValueError(f"Unknown or unimplemented algorithm '{value}'")


DISPLAY_NAMES = {
    AlgorithmId.FIRST_COME_FIRST_SERVED: "First-Come-First-Served (FCFS)",
    AlgorithmId.SHORTEST_JOB_FIRST: "Shortest Job First (SJF)",
    AlgorithmId.ROUND_ROBIN: "Round Robin (RR)",
    AlgorithmId.PRIORITY: "Priority Scheduling",
    AlgorithmId.GENETIC: "Genetic Algorithm (GA)",
    AlgorithmId.PARTICLE_SWARM: "Particle Swarm Optimization (PSO)",
    AlgorithmId.ANT_COLONY: "Ant Colony Optimization (ACO)",
    AlgorithmId.SIMULATED_ANNEALING: "Simulated Annealing (SA)",
}

_ALIASES: Dict[str, AlgorithmId] = {alg.value: alg for alg in AlgorithmId}
_ALIASES.update(
    {
        "first-come-first-served": AlgorithmId.FIRST_COME_FIRST_SERVED,
        "shortest-job-first": AlgorithmId.SHORTEST_JOB_FIRST,
        "round-robin": AlgorithmId.ROUND_ROBIN,
        "genetic": AlgorithmId.GENETIC,
        "particle-swarm": AlgorithmId.PARTICLE_SWARM,
        "ant-colony": AlgorithmId.ANT_COLONY,
        "simulated-annealing": AlgorithmId.SIMULATED_ANNEALING,
    }
)


def schedule_fcfs(processes: Sequence[Process]) -> AlgorithmResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    schedule = build_schedule(processes, arrival_order(processes))
    alg = AlgorithmId.FIRST_COME_FIRST_SERVED
    return build_result(alg.value, alg.display_name, processes, schedule.scheduled, schedule.timeline)


def _select_by(processes: Sequence[Process], key: Callable[[Process], float]) -> List[int]:
    """
    Non-preemptive selection loop shared by SJF and Priority.

    At each decision point, among processes that have arrived and are not yet
    scheduled, pick the one with the smallest ``key``; ties go to the first
    one in arrival order. Returns the resulting dispatch order.
    """
    remaining = arrival_order(processes)
    order: List[int] = []
    time = 0.0

    while remaining:
        ready = [i for i in remaining if processes[i].arrival_time <= time]

        if not ready:
            # If nothing is ready, jump time to the next arrival.
            time = min(processes[i].arrival_time for i in remaining)
            continue

        chosen = min(ready, key=lambda i: key(processes[i]))
        remaining.remove(chosen)
        order.append(chosen)
        time += processes[chosen].burst_time

    return order


def schedule_sjf(processes: Sequence[Process]) -> AlgorithmResult:
    """
    Shortest Job First (non-preemptive).
    """
    schedule = build_schedule(processes, _select_by(processes, lambda p: p.burst_time))
    alg = AlgorithmId.SHORTEST_JOB_FIRST
    return build_result(alg.value, alg.display_name, processes, schedule.scheduled, schedule.timeline)


def schedule_priority(processes: Sequence[Process]) -> AlgorithmResult:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority; a missing priority
    is treated as the lowest.
    """

    def priority_key(p: Process) -> float:
        return p.priority if p.priority is not None else float("inf")

    schedule = build_schedule(processes, _select_by(processes, priority_key))
    alg = AlgorithmId.PRIORITY
    return build_result(alg.value, alg.display_name, processes, schedule.scheduled, schedule.timeline)


def schedule_rr(processes: Sequence[Process], quantum: float = DEFAULT_QUANTUM) -> AlgorithmResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes that arrive while a slice runs join the ready queue before the
    preempted process is put back at its tail.
    """
    if quantum is None or quantum <= 0:
        raise ValueError("Round Robin requires a positive quantum (use --quantum)")

    pending: Deque[int] = deque(arrival_order(processes))
    remaining = [p.burst_time for p in processes]
    first_dispatch: Dict[int, float] = {}
    completion: Dict[int, float] = {}

    time = 0.0
    ready: Deque[int] = deque()
    timeline: List[ScheduledSlice] = []

    def enqueue_arrivals(current_time: float) -> None:
        while pending and processes[pending[0]].arrival_time <= current_time:
            ready.append(pending.popleft())

    enqueue_arrivals(time)

    while ready or pending:
        if not ready:
            # Jump to next arrival if CPU is idle
            time = processes[pending[0]].arrival_time
            enqueue_arrivals(time)
            continue

        idx = ready.popleft()
        first_dispatch.setdefault(idx, time)

        run_time = min(quantum, remaining[idx])
        slice_end = time + run_time
        timeline.append(ScheduledSlice(pid=processes[idx].pid, start_time=time, end_time=slice_end))

        time = slice_end
        remaining[idx] -= run_time

        enqueue_arrivals(time)

        if remaining[idx] > _REMAINING_TOLERANCE:
            ready.append(idx)
        else:
            completion[idx] = time

    scheduled: List[ScheduledProcess] = []
    for idx, p in enumerate(processes):
        start_time = first_dispatch[idx]
        scheduled.append(
            ScheduledProcess.from_process(p, start_time, completion[idx], response_time=start_time - p.arrival_time)
        )

    alg = AlgorithmId.ROUND_ROBIN
    return build_result(
        alg.value,
        alg.display_name,
        processes,
        scheduled,
        timeline,
        include_response=True,
        quantum=quantum,
    )


def _from_search(alg: AlgorithmId, processes: Sequence[Process], outcome: optimizers.SearchOutcome) -> AlgorithmResult:
    logger.debug("%s finished with best fitness %.4f", alg.display_name, outcome.fitness)
    schedule = outcome.schedule
    return build_result(alg.value, alg.display_name, processes, schedule.scheduled, schedule.timeline)


def schedule_genetic(processes, config=None, rng=None) -> AlgorithmResult:
    outcome = optimizers.genetic_algorithm(processes, config, rng)
    return _from_search(AlgorithmId.GENETIC, processes, outcome)


def schedule_pso(processes, config=None, rng=None) -> AlgorithmResult:
    outcome = optimizers.particle_swarm(processes, config, rng)
    return _from_search(AlgorithmId.PARTICLE_SWARM, processes, outcome)


def schedule_aco(processes, config=None, rng=None) -> AlgorithmResult:
    outcome = optimizers.ant_colony(processes, config, rng)
    return _from_search(AlgorithmId.ANT_COLONY, processes, outcome)


def schedule_sa(processes, config=None, rng=None) -> AlgorithmResult:
    outcome = optimizers.simulated_annealing(processes, config, rng)
    return _from_search(AlgorithmId.SIMULATED_ANNEALING, processes, outcome)


ALGORITHMS = {
    AlgorithmId.FIRST_COME_FIRST_SERVED: schedule_fcfs,
    AlgorithmId.SHORTEST_JOB_FIRST: schedule_sjf,
    AlgorithmId.ROUND_ROBIN: schedule_rr,
    AlgorithmId.PRIORITY: schedule_priority,
    AlgorithmId.GENETIC: schedule_genetic,
    AlgorithmId.PARTICLE_SWARM: schedule_pso,
    AlgorithmId.ANT_COLONY: schedule_aco,
    AlgorithmId.SIMULATED_ANNEALING: schedule_sa,
}


def run_algorithm(
    name: Union[str, AlgorithmId],
    processes: Sequence[Process],
    config: Optional[OptimizerConfig] = None,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> AlgorithmResult:
    """
    Dispatch to the requested algorithm.

    Round Robin reads its quantum from ``config``; the search-based
    algorithms read their section of ``config`` and draw from ``rng``
    (or a fresh ``random.Random(seed)`` when no generator is given).
    """
    alg = AlgorithmId.parse(name)
    config = config or OptimizerConfig()
    logger.debug("Running %s on %d processes", alg.display_name, len(processes))

    if alg is AlgorithmId.ROUND_ROBIN:
        return schedule_rr(processes, quantum=config.quantum)

    if not alg.is_stochastic:
        return ALGORITHMS[alg](processes)

    sections = {
        AlgorithmId.GENETIC: config.genetic,
        AlgorithmId.PARTICLE_SWARM: config.swarm,
        AlgorithmId.ANT_COLONY: config.colony,
        AlgorithmId.SIMULATED_ANNEALING: config.annealing,
    }
    rng = rng or random.Random(seed)
    return ALGORITHMS[alg](processes, config=sections[alg], rng=rng)


def run_algorithms(
    processes: Sequence[Process],
    algorithms: Iterable[Union[str, AlgorithmId]],
    quantum: Optional[float] = None,
    seed: Optional[int] = None,
    config: Optional[OptimizerConfig] = None,
) -> List[AlgorithmResult]:
    """
    Run each requested algorithm independently, returning results in request order.

    Every search-based run gets its own generator seeded with ``seed``, so its
    result does not depend on which other algorithms were requested.
    """
    config = config or OptimizerConfig()
    if quantum is not None:
        config = replace(config, quantum=quantum)

    # Parse everything first so a bad id fails before any work is done.
    requested = [AlgorithmId.parse(name) for name in algorithms]
    processes = tuple(processes)

    return [run_algorithm(alg, processes, config=config, seed=seed) for alg in requested]
