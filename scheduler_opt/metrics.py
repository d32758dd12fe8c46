from __future__ import annotations

from typing import List, Optional, Sequence

from .models import AlgorithmResult, Process, ScheduledProcess, ScheduledSlice


def build_result(
    algorithm: str,
    name: str,
    processes: Sequence[Process],
    scheduled: List[ScheduledProcess],
    timeline: List[ScheduledSlice],
    include_response: bool = False,
    quantum: Optional[float] = None,
) -> AlgorithmResult:
    """
    Aggregate a finished schedule into an AlgorithmResult.

    A makespan of zero (empty schedule) is replaced by 1 when dividing, so
    throughput and CPU utilization come out as 0 rather than failing.
    """
    n = len(processes)
    summary = summarize_process_metrics(scheduled)

    makespan = max((p.end_time for p in scheduled), default=0.0)
    divisor = makespan or 1
    total_burst = sum(p.burst_time for p in processes)

    return AlgorithmResult(
        algorithm=algorithm,
        name=name,
        scheduled_processes=scheduled,
        timeline=timeline,
        average_waiting_time=summary["avg_waiting"],
        average_turnaround_time=summary["avg_turnaround"],
        throughput=n / divisor,
        cpu_utilization=100 * total_burst / divisor,
        makespan=makespan,
        average_response_time=summary["avg_response"] if include_response else None,
        quantum=quantum,
    )


def summarize_process_metrics(processes: List[ScheduledProcess]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
    }
