from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from typing import List, Sequence

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .algorithms import AlgorithmId, run_algorithm, run_algorithms
from .config import OptimizerConfig, load_config
from .gantt import build_rich_gantt, gantt_scale
from .models import AlgorithmResult
from .ranking import find_best_algorithm, rank_results
from .workload_io import load_workload

ALL_ALGORITHMS = [alg.value for alg in AlgorithmId]

BEST_METRICS = [
    ("average_waiting_time", "Lowest avg waiting"),
    ("average_turnaround_time", "Lowest avg turnaround"),
    ("throughput", "Highest throughput"),
    ("cpu_utilization", "Highest CPU utilization"),
]


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    parser.add_argument(
        "--quantum",
        "-q",
        type=float,
        default=None,
        help="Time quantum for round-robin (default: 2, or the value in --config).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for GA, PSO, ACO and SA (default: unseeded).",
    )
    parser.add_argument(
        "--config",
        "-c",
        default=None,
        help="JSON file with optimizer parameters.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scheduler-opt",
        description="CPU scheduling simulator (FCFS, SJF, RR, Priority) with GA, PSO, ACO and SA search.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log algorithm progress.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help=f"Algorithm to use ({', '.join(ALL_ALGORITHMS)}).",
    )
    _add_common_options(run_parser)

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and rank them.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=ALL_ALGORITHMS,
        help=f"Algorithms to compare (default: {' '.join(ALL_ALGORITHMS)}).",
    )
    _add_common_options(compare_parser)

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _load_config(args: argparse.Namespace) -> OptimizerConfig:
    config = load_config(args.config) if args.config else OptimizerConfig()
    if args.quantum is not None:
        config = replace(config, quantum=args.quantum)
    config.validate()
    return config


def _fmt(value: float) -> str:
    return f"{value:g}"


def _print_result(result: AlgorithmResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.name}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {_fmt(result.quantum)}")

    console.print()

    panel, time_marks = build_rich_gantt(result.timeline, scale=gantt_scale(result.timeline))
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()

    headers = [
        "PID",
        "Name",
        "Arrive",
        "Burst",
        "Start",
        "End",
        "Wait",
        "Turnaround",
        "Response",
        "Priority",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Name", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.scheduled_processes:
        proc_table.add_row(
            p.pid,
            p.name,
            _fmt(p.arrival_time),
            _fmt(p.burst_time),
            _fmt(p.start_time),
            _fmt(p.end_time),
            _fmt(p.waiting_time),
            _fmt(p.turnaround_time),
            _fmt(p.response_time),
            "" if p.priority is None else str(p.priority),
        )

    console.print(proc_table)
    console.print()

    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{result.average_waiting_time:.2f}")
    sys_table.add_row("Avg turnaround", f"{result.average_turnaround_time:.2f}")
    if result.average_response_time is not None:
        sys_table.add_row("Avg response", f"{result.average_response_time:.2f}")
    sys_table.add_row("Makespan", _fmt(result.makespan))
    sys_table.add_row("Throughput (proc/time)", f"{result.throughput:.3f}")
    sys_table.add_row("CPU utilization", f"{result.cpu_utilization:.1f}%")

    console.print(sys_table)


def _print_comparison(results: Sequence[AlgorithmResult], console: Console) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Throughput", justify="right")
    summary_table.add_column("CPU util", justify="right")

    for result in results:
        response = result.average_response_time
        summary_table.add_row(
            result.name,
            f"{result.average_waiting_time:.2f}",
            f"{result.average_turnaround_time:.2f}",
            "" if response is None else f"{response:.2f}",
            f"{result.throughput:.3f}",
            f"{result.cpu_utilization:.1f}%",
        )

    console.print(summary_table)

    best_table = Table(title="Best per metric", box=box.SIMPLE_HEAVY)
    best_table.add_column("Metric")
    best_table.add_column("Algorithm")
    for metric, label in BEST_METRICS:
        best = find_best_algorithm(results, metric)
        best_table.add_row(label, best.name if best else "")
    console.print(best_table)

    ranking_table = Table(title="Overall ranking (lower score is better)", box=box.SIMPLE_HEAVY)
    ranking_table.add_column("#", justify="right")
    ranking_table.add_column("Algorithm")
    ranking_table.add_column("Score", justify="right")
    for position, ranked in enumerate(rank_results(results), start=1):
        ranking_table.add_row(str(position), ranked.result.name, f"{ranked.score:.3f}")
    console.print(ranking_table)


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    console = Console()

    try:
        config = _load_config(args)
        processes = load_workload(args.workload)

        if args.command == "run":
            result = run_algorithm(args.algorithm, processes, config=config, seed=args.seed)
            _print_result(result, console)
            return 0

        if args.command == "compare":
            results = run_algorithms(processes, args.algorithms, seed=args.seed, config=config)
            _print_comparison(results, console)
            return 0
    except (OSError, ValueError) as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
