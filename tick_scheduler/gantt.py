from __future__ import annotations

from typing import Dict, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice

_COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def _ordered(slices: List[ScheduledSlice]) -> List[ScheduledSlice]:
    return sorted(slices, key=lambda s: (s.start_time, s.end_time))


def render_gantt(slices: List[ScheduledSlice]) -> str:
    """
    Plain-text Gantt chart; '.' marks ticks where the CPU sat idle.
    """
    if not slices:
        return "(no execution)"

    bar = "|"
    labels = " "
    boundaries: List[str] = ["0"]
    last_time = 0

    for sl in _ordered(slices):
        gap = sl.start_time - last_time
        if gap > 0:
            bar += "." * gap
            labels += " " * gap
            boundaries.append(str(sl.start_time))

        width = sl.end_time - sl.start_time
        bar += "=" * width
        labels += sl.label[:width].ljust(width)
        boundaries.append(str(sl.end_time))
        last_time = sl.end_time

    bar += "|"
    return "\n".join(["Gantt Chart:", bar, labels, " ".join(boundaries)])


def build_rich_gantt(slices: List[ScheduledSlice]) -> tuple[Panel, str]:
    """
    Build a Rich Panel with one colored cell per tick, plus the slice
    boundaries as a separate line.
    """
    if not slices:
        return Panel("No execution", title="Gantt Chart"), ""

    pid_to_color: Dict[int, str] = {}
    timeline = Text()
    labels = Text()
    boundaries: List[str] = ["0"]
    last_time = 0

    for sl in _ordered(slices):
        if sl.start_time > last_time:
            idle = sl.start_time - last_time
            timeline.append("." * idle, style="dim")
            labels.append(" " * idle)
            boundaries.append(str(sl.start_time))

        color = pid_to_color.setdefault(sl.pid, _COLORS[len(pid_to_color) % len(_COLORS)])
        width = sl.end_time - sl.start_time
        timeline.append(" " * width, style=f"on {color}")
        labels.append(sl.label[:width].ljust(width), style="bold")
        boundaries.append(str(sl.end_time))
        last_time = sl.end_time

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    return Panel.fit(table, title="Gantt Chart"), " ".join(boundaries)
