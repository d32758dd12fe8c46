from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .models import Process, ScheduledProcess, ScheduledSlice


@dataclass
class Schedule:
    """
    Outcome of running a fixed ordering of processes on a single CPU.
    """

    scheduled: List[ScheduledProcess] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    total_waiting_time: float = 0.0

    @property
    def average_waiting_time(self) -> float:
        if not self.scheduled:
            return 0.0
        return self.total_waiting_time / len(self.scheduled)


def build_schedule(processes: Sequence[Process], order: Optional[Sequence[int]] = None) -> Schedule:
    """
    Non-preemptive single-CPU simulation of processes in the given order.

    ``order`` is a permutation of indices into ``processes``; when omitted the
    processes run in the order given. The clock jumps forward to a process's
    arrival time if the CPU would otherwise start it early.
    """
    if order is None:
        order = range(len(processes))

    time = 0.0
    schedule = Schedule()

    for idx in order:
        p = processes[idx]
        if time < p.arrival_time:
            time = p.arrival_time

        start_time = time
        end_time = start_time + p.burst_time

        waiting_time = max(0.0, start_time - p.arrival_time)
        record = ScheduledProcess.from_process(
            p, start_time, end_time, response_time=waiting_time, waiting_time=waiting_time
        )
        schedule.scheduled.append(record)
        schedule.timeline.append(ScheduledSlice(pid=p.pid, start_time=start_time, end_time=end_time))
        schedule.total_waiting_time += record.waiting_time

        time = end_time

    return schedule


def average_waiting_time(processes: Sequence[Process], order: Sequence[int]) -> float:
    """
    Fitness of an ordering: average waiting time, lower is better.
    """
    return build_schedule(processes, order).average_waiting_time


def arrival_order(processes: Sequence[Process]) -> List[int]:
    """
    Indices sorted by arrival time; ties keep input order.
    """
    return sorted(range(len(processes)), key=lambda i: processes[i].arrival_time)


def burst_order(processes: Sequence[Process]) -> List[int]:
    """
    Arrival order re-sorted by burst time, so equal bursts stay in arrival order.
    """
    return sorted(arrival_order(processes), key=lambda i: processes[i].burst_time)
