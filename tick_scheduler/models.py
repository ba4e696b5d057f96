from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, Union

from .errors import MalformedEvent

if TYPE_CHECKING:
    from .policies import Policy


@dataclass(frozen=True)
class EventRecord:
    """
    One line of a workload as delivered by the loader.

    ``duration`` is the CPU burst for a process arrival and the I/O length
    for a block request.
    """

    arrival_time: int
    duration: int
    is_block_request: bool = False


@dataclass
class Process:
    pid: int
    arrival_time: int
    burst_time: int
    remaining_time: int = field(init=False)
    blocked_time: int = 0
    start_time: Optional[int] = None
    completion_time: Optional[int] = None
    waiting_time: Optional[int] = None
    turnaround_time: Optional[int] = None
    response_time: Optional[int] = None
    is_terminated: bool = False
    first_execution: bool = True

    def __post_init__(self) -> None:
        self.remaining_time = self.burst_time

    @property
    def label(self) -> str:
        return f"P{self.pid}"


@dataclass(frozen=True)
class BlockRequest:
    """I/O interrupt aimed at whichever process holds the CPU at ``arrival_time``."""

    rid: int
    arrival_time: int
    duration: int


Admission = Union[Process, BlockRequest]


def validate_records(records: List[EventRecord]) -> None:
    last_arrival = 0
    for idx, record in enumerate(records, start=1):
        if record.arrival_time < 0:
            raise MalformedEvent(f"Event {idx}: negative arrival time {record.arrival_time}")
        if record.duration <= 0:
            kind = "block duration" if record.is_block_request else "burst time"
            raise MalformedEvent(f"Event {idx}: {kind} must be positive, got {record.duration}")
        if record.arrival_time < last_arrival:
            raise MalformedEvent(
                f"Event {idx}: arrival time {record.arrival_time} is earlier than the previous event ({last_arrival})"
            )
        last_arrival = record.arrival_time


class ProcessTable:
    """
    Schedulable processes plus the ordered admission stream they came from.

    Built once from loader records; the engine mutates the ``Process``
    entries in place while it runs.
    """

    def __init__(self, admissions: Iterable[Admission] = ()) -> None:
        self.admissions: List[Admission] = list(admissions)
        self.processes: List[Process] = [a for a in self.admissions if isinstance(a, Process)]

    @classmethod
    def from_records(cls, records: Iterable[EventRecord]) -> "ProcessTable":
        records = list(records)
        validate_records(records)

        admissions: List[Admission] = []
        next_pid = 1
        next_rid = 1

        for record in records:
            if record.is_block_request:
                admissions.append(BlockRequest(next_rid, record.arrival_time, record.duration))
                next_rid += 1
            else:
                admissions.append(Process(next_pid, record.arrival_time, record.duration))
                next_pid += 1

        return cls(admissions)

    def __iter__(self) -> Iterator[Process]:
        return iter(self.processes)

    def __len__(self) -> int:
        return len(self.processes)


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int

    @property
    def label(self) -> str:
        return f"P{self.pid}"


@dataclass
class ProcessMetrics:
    pid: int
    arrival_time: int
    burst_time: int
    start_time: int
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    avg_waiting: float = 0.0
    avg_turnaround: float = 0.0
    avg_response: float = 0.0


@dataclass
class ScheduleResult:
    policy: Policy
    quantum: Optional[int]
    processes: List[ProcessMetrics] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    system: Optional[SystemMetrics] = None