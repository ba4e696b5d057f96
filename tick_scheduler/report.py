from __future__ import annotations

from pathlib import Path
from typing import List

from .metrics import summarize_process_metrics
from .models import ScheduleResult
from .policies import Policy

_HEADER = "Process Id    Arrival Time    Burst Time    Completion Time    Waiting Time    Turn Around Time"


def report_title(result: ScheduleResult) -> str:
    title = f"{result.policy.title} Scheduling Policy"
    if result.policy is Policy.RR:
        title += f" with Time Quantum of {result.quantum}"
    return title


def format_report(result: ScheduleResult) -> str:
    """
    Render the fixed-width text report; response time is only listed for
    Round Robin.
    """
    with_response = result.policy is Policy.RR

    lines: List[str] = [report_title(result), ""]
    lines.append(_HEADER + ("   Response Time" if with_response else ""))

    for p in result.processes:
        row = (
            f"{p.pid:6d}{p.arrival_time:15d}{p.burst_time:14d}"
            f"{p.completion_time:18d}{p.waiting_time:17d}{p.turnaround_time:18d}"
        )
        if with_response:
            row += f"{p.response_time:22d}"
        lines.append(row)

    summary = summarize_process_metrics(result.processes)
    lines.append("")
    lines.append(f"Average Waiting Time: {summary['avg_waiting']:.2f}")
    lines.append(f"Average Turn Around Time: {summary['avg_turnaround']:.2f}")
    return "\n".join(lines) + "\n"


def write_report(result: ScheduleResult, path: str | Path) -> Path:
    path = Path(path)
    path.write_text(format_report(result), encoding="utf-8")
    return path
