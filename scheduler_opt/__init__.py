"""
Scheduler optimizer package.

Simulates CPU scheduling of a set of processes with classic rule-based
algorithms (FCFS, SJF, Priority, Round Robin) and with search-based
orderings (genetic algorithm, particle swarm, ant colony, simulated
annealing), and ranks the resulting schedules.
"""

from .algorithms import AlgorithmId, run_algorithm, run_algorithms
from .models import AlgorithmResult, Process, ScheduledProcess
from .ranking import best_overall, find_best_algorithm, rank_results

__all__ = [
    "AlgorithmId",
    "AlgorithmResult",
    "Process",
    "ScheduledProcess",
    "best_overall",
    "find_best_algorithm",
    "rank_results",
    "run_algorithm",
    "run_algorithms",
    "cli",
]
