import pytest

from scheduler_opt.builder import arrival_order, average_waiting_time, build_schedule, burst_order
from scheduler_opt.metrics import build_result
from scheduler_opt.models import Process


def _procs():
    return [
        Process("A", arrival_time=2, burst_time=3),
        Process("B", arrival_time=0, burst_time=4),
        Process("C", arrival_time=0, burst_time=1),
    ]


def test_runs_in_given_order_with_arrival_gating():
    schedule = build_schedule(_procs(), [0, 1, 2])
    # A cannot start before it arrives at t=2
    assert [(p.pid, p.start_time, p.end_time) for p in schedule.scheduled] == [
        ("A", 2, 5),
        ("B", 5, 9),
        ("C", 9, 10),
    ]
    assert schedule.total_waiting_time == 0 + 5 + 9
    assert schedule.average_waiting_time == pytest.approx(14 / 3)


def test_default_order_is_input_order():
    assert [p.pid for p in build_schedule(_procs()).scheduled] == ["A", "B", "C"]


def test_non_preemptive_records():
    schedule = build_schedule(_procs(), arrival_order(_procs()))
    for p in schedule.scheduled:
        assert p.end_time == p.start_time + p.burst_time
        assert p.response_time == p.waiting_time
        assert p.start_time >= p.arrival_time


def test_fitness_matches_schedule():
    procs = _procs()
    order = [2, 1, 0]
    assert average_waiting_time(procs, order) == build_schedule(procs, order).average_waiting_time


def test_seed_orderings():
    procs = _procs()
    assert arrival_order(procs) == [1, 2, 0]
    assert burst_order(procs) == [2, 0, 1]


def test_empty_schedule():
    schedule = build_schedule([])
    assert schedule.scheduled == []
    assert schedule.average_waiting_time == 0.0


def test_build_result_metrics():
    procs = _procs()
    schedule = build_schedule(procs, arrival_order(procs))
    result = build_result("fcfs", "FCFS", procs, schedule.scheduled, schedule.timeline)
    assert result.makespan == 8
    assert result.throughput == pytest.approx(3 / 8)
    assert result.cpu_utilization == pytest.approx(100.0)
    assert result.average_turnaround_time == pytest.approx(sum(p.turnaround_time for p in schedule.scheduled) / 3)


def test_build_result_empty_uses_makespan_floor():
    result = build_result("fcfs", "FCFS", [], [], [])
    assert result.makespan == 0
    assert result.throughput == 0
    assert result.cpu_utilization == 0


def test_fractional_arrival_waits_are_not_negative():
    procs = [Process("A", arrival_time=0.7, burst_time=0.1), Process("B", arrival_time=0.0, burst_time=0.3)]
    for order in ([0, 1], [1, 0]):
        schedule = build_schedule(procs, order)
        assert all(p.waiting_time >= 0 for p in schedule.scheduled)
        assert schedule.total_waiting_time >= 0
