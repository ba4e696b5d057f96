from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .engine import simulate
from .errors import InvalidPolicy, SchedulerError
from .gantt import build_rich_gantt
from .metrics import summarize_process_metrics
from .models import ScheduleResult
from .policies import Policy
from .report import report_title, write_report
from .workload_io import Workload, load_workload

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tick-scheduler",
        description="Tick-by-tick CPU scheduling simulator with I/O blocking (FCFS, SJF, SRTN, RR).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every dispatch, block, unblock and completion.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Simulate one policy on a workload file.")
    run_parser.add_argument("workload", help="Path to a text, JSON or CSV workload file.")
    run_parser.add_argument(
        "--policy",
        "-p",
        default=None,
        help="Policy to use (1-4 or fcfs, sjf, srtn, rr); overrides the workload header.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round-robin; overrides the workload header.",
    )
    run_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Also write the text report to this file (e.g. output.txt).",
    )
    run_parser.add_argument(
        "--gantt",
        action="store_true",
        help="Show the Gantt chart of the schedule.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run all four policies on the same workload and compare average metrics.",
    )
    compare_parser.add_argument("workload", help="Path to a text, JSON or CSV workload file.")
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum used for RR (default: the workload's, else 2).",
    )

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, show_time=False)],
        force=True,
    )


def _resolve_policy(workload: Workload, override: Optional[str]) -> Policy:
    if override is not None:
        return Policy.parse(override)
    if workload.policy is None:
        raise InvalidPolicy("Workload does not name a scheduling policy; pass --policy")
    return workload.policy


def _print_result(result: ScheduleResult, console: Console, gantt: bool = False) -> None:
    console.print(f"[bold]{report_title(result)}[/bold]")
    console.print()

    if gantt:
        panel, boundaries = build_rich_gantt(result.timeline)
        console.print(panel)
        if boundaries:
            console.print(boundaries)
        console.print()

    headers = ["PID", "Arrive", "Burst", "Start", "Complete", "Wait", "Turnaround", "Response"]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        proc_table.add_column(h, justify="center" if h == "PID" else "right")

    for p in result.processes:
        proc_table.add_row(
            str(p.pid),
            str(p.arrival_time),
            str(p.burst_time),
            str(p.start_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
        )

    console.print(proc_table)

    if result.system:
        sys = result.system
        sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
        sys_table.add_column("Metric")
        sys_table.add_column("Value", justify="right")

        sys_table.add_row("Avg waiting", f"{sys.avg_waiting:.2f}")
        sys_table.add_row("Avg turnaround", f"{sys.avg_turnaround:.2f}")
        sys_table.add_row("Avg response", f"{sys.avg_response:.2f}")
        sys_table.add_row("Makespan", str(sys.makespan))
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")

        console.print(sys_table)


def _run(args, console: Console) -> int:
    workload = load_workload(Path(args.workload))
    policy = _resolve_policy(workload, args.policy)
    quantum = args.quantum if args.quantum is not None else workload.quantum

    result = simulate(workload.records, policy, quantum=quantum)
    _print_result(result, console, gantt=args.gantt)

    if args.output:
        path = write_report(result, args.output)
        console.print(f"[dim]Report written to {path}[/dim]")
    return 0


def _compare(args, console: Console) -> int:
    workload = load_workload(Path(args.workload))
    quantum = args.quantum if args.quantum is not None else workload.quantum
    if quantum is None:
        quantum = 2

    summary_table = Table(title=f"Policy comparison: {args.workload}", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Policy")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")

    for policy in Policy:
        result = simulate(workload.records, policy, quantum=quantum)
        summary = summarize_process_metrics(result.processes)
        summary_table.add_row(
            policy.name,
            "" if result.quantum is None else str(result.quantum),
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_turnaround']:.2f}",
            f"{summary['avg_response']:.2f}",
        )

    console.print(summary_table)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    console = Console()

    try:
        if args.command == "run":
            return _run(args, console)
        if args.command == "compare":
            return _compare(args, console)
    except SchedulerError as exc:
        logger.debug("Simulation aborted", exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
