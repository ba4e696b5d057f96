from __future__ import annotations

from typing import Iterable, List, Optional

from .models import Process, ProcessMetrics, ScheduledSlice, ScheduleResult, SystemMetrics
from .policies import Policy


def process_metrics(processes: Iterable[Process]) -> List[ProcessMetrics]:
    """
    Freeze the timing fields of terminated processes, in pid order.
    """
    metrics: List[ProcessMetrics] = []
    for p in sorted(processes, key=lambda p: p.pid):
        if not p.is_terminated:
            raise RuntimeError(f"Process {p.pid} did not terminate")

        turnaround_time = p.completion_time - p.arrival_time
        metrics.append(
            ProcessMetrics(
                pid=p.pid,
                arrival_time=p.arrival_time,
                burst_time=p.burst_time,
                start_time=p.start_time,
                completion_time=p.completion_time,
                waiting_time=turnaround_time - p.burst_time,
                turnaround_time=turnaround_time,
                response_time=p.response_time,
            )
        )
    return metrics


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute throughput, CPU utilization and averages given populated
    per-process metrics and timeline slices.
    """
    summary = summarize_process_metrics(result.processes)

    if not result.processes:
        system = SystemMetrics(cpu_busy_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)
        result.system = system
        return system

    makespan = max(p.completion_time for p in result.processes)
    cpu_busy_time = sum(slice_.end_time - slice_.start_time for slice_ in result.timeline)

    throughput = len(result.processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        avg_waiting=summary["avg_waiting"],
        avg_turnaround=summary["avg_turnaround"],
        avg_response=summary["avg_response"],
    )
    result.system = system
    return system


def summarize_process_metrics(processes: List[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.

    An empty process set averages to zero.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
    }


def build_result(
    processes: Iterable[Process],
    policy: Policy,
    quantum: Optional[int],
    timeline: List[ScheduledSlice],
) -> ScheduleResult:
    result = ScheduleResult(policy=policy, quantum=quantum, processes=process_metrics(processes), timeline=timeline)
    compute_system_metrics(result)
    return result
