from __future__ import annotations

from typing import Dict, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def _cells(duration: float, scale: float) -> int:
    return max(1, round(duration * scale))


def gantt_scale(slices: List[ScheduledSlice], max_width: int = 120) -> float:
    """
    Cells per time unit so the shortest slice gets about one cell.

    Whole-unit schedules keep one cell per time unit; sub-unit schedules are
    stretched, but never past ``max_width`` cells in total.
    """
    durations = [s.end_time - s.start_time for s in slices if s.end_time > s.start_time]
    if not durations:
        return 1.0

    shortest = min(durations)
    if shortest >= 1:
        return 1.0

    makespan = max(s.end_time for s in slices)
    return min(1.0 / shortest, max(1.0, max_width / makespan))


def build_rich_gantt(slices: List[ScheduledSlice], scale: float = 1.0) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.

    ``scale`` is the number of character cells per time unit; durations are
    rounded to whole cells with a minimum of one.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    slices = sorted(slices, key=lambda s: (s.start_time, s.end_time))

    pid_to_color: Dict[str, str] = {}

    def pid_color(pid: str) -> str:
        if pid not in pid_to_color:
            pid_to_color[pid] = COLORS[len(pid_to_color) % len(COLORS)]
        return pid_to_color[pid]

    timeline = Text()
    labels = Text()
    time_marks = "0"
    last_time = 0.0

    for sl in slices:
        idle_gap = sl.start_time - last_time
        if idle_gap > 0:
            gap = _cells(idle_gap, scale)
            timeline.append(" " * gap)
            labels.append(" " * gap)
            last_time = sl.start_time
            time_marks += f"{last_time:>4g}"

        width = _cells(sl.end_time - sl.start_time, scale)
        color = pid_color(sl.pid)

        timeline.append(" " * width, style=f"on {color}")
        labels.append(sl.pid[:width].ljust(width), style="bold")

        last_time = sl.end_time
        time_marks += f"{last_time:>4g}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
