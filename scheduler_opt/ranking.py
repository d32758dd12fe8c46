from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .models import AlgorithmResult

MINIMIZED_METRICS = ("average_waiting_time", "average_turnaround_time")
MAXIMIZED_METRICS = ("throughput", "cpu_utilization")

# Composite score weights (waiting, turnaround, throughput, utilization).
WEIGHTS = (0.3, 0.3, 0.2, 0.2)


@dataclass
class RankedResult:
    result: AlgorithmResult
    score: float
    waiting_score: float
    turnaround_score: float
    throughput_score: float
    utilization_score: float


def find_best_algorithm(
    results: Sequence[AlgorithmResult],
    metric: str = "average_waiting_time",
) -> Optional[AlgorithmResult]:
    """
    Best result for a single metric: lowest for waiting/turnaround time,
    highest for throughput/CPU utilization. Ties keep the earliest result.
    """
    if metric in MINIMIZED_METRICS:
        sign = 1
    elif metric in MAXIMIZED_METRICS:
        sign = -1
    else:
        raise ValueError(f"Unknown metric '{metric}'")

    if not results:
        return None

    return min(results, key=lambda r: sign * getattr(r, metric))


def _ratio(value: float, maximum: float) -> float:
    return value / maximum if maximum > 0 else 0.0


def rank_results(results: Sequence[AlgorithmResult]) -> List[RankedResult]:
    """
    Weighted composite ranking, best (lowest score) first.

    Each metric is divided by its maximum over ``results``; throughput and
    utilization are inverted (1 - ratio) so that 0 is always best.
    """
    if not results:
        return []

    max_wait = max(r.average_waiting_time for r in results)
    max_turnaround = max(r.average_turnaround_time for r in results)
    max_throughput = max(r.throughput for r in results)
    max_util = max(r.cpu_utilization for r in results)

    w_wait, w_turn, w_thru, w_util = WEIGHTS
    ranked: List[RankedResult] = []
    for r in results:
        waiting = _ratio(r.average_waiting_time, max_wait)
        turnaround = _ratio(r.average_turnaround_time, max_turnaround)
        throughput = 1 - _ratio(r.throughput, max_throughput)
        utilization = 1 - _ratio(r.cpu_utilization, max_util)
        score = waiting * w_wait + turnaround * w_turn + throughput * w_thru + utilization * w_util
        ranked.append(RankedResult(r, score, waiting, turnaround, throughput, utilization))

    # sorted() is stable, so equal scores keep input order.
    return sorted(ranked, key=lambda item: item.score)


def best_overall(results: Sequence[AlgorithmResult]) -> Optional[RankedResult]:
    ranked = rank_results(results)
    return ranked[0] if ranked else None
