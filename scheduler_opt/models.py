from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Process:
    """
    Input descriptor for one process. Never mutated by the schedulers.
    """

    pid: str
    arrival_time: float
    burst_time: float
    priority: Optional[int] = None
    name: str = ""

    @property
    def label(self) -> str:
        return self.name or self.pid


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: str
    start_time: float
    end_time: float


@dataclass
class ScheduledProcess:
    pid: str
    name: str
    arrival_time: float
    burst_time: float
    start_time: float
    end_time: float
    waiting_time: float
    turnaround_time: float
    response_time: float
    priority: Optional[int] = None

    @classmethod
    def from_process(
        cls,
        process: Process,
        start_time: float,
        end_time: float,
        response_time: float,
        waiting_time: Optional[float] = None,
    ) -> "ScheduledProcess":
        turnaround_time = end_time - process.arrival_time
        if waiting_time is None:
            waiting_time = turnaround_time - process.burst_time
        return cls(
            pid=process.pid,
            name=process.label,
            arrival_time=process.arrival_time,
            burst_time=process.burst_time,
            start_time=start_time,
            end_time=end_time,
            waiting_time=max(0.0, waiting_time),
            turnaround_time=turnaround_time,
            response_time=response_time,
            priority=process.priority,
        )


@dataclass
class AlgorithmResult:
    algorithm: str
    name: str
    scheduled_processes: List[ScheduledProcess] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    average_waiting_time: float = 0.0
    average_turnaround_time: float = 0.0
    throughput: float = 0.0
    cpu_utilization: float = 0.0
    makespan: float = 0.0
    average_response_time: Optional[float] = None
    quantum: Optional[float] = None
