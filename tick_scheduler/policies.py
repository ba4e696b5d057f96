"""
Scheduling policies and the strategies that set them apart.

Every policy runs on the same tick loop. They only differ in how the ready
queue is ordered and in when a running process gets kicked off the CPU.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Optional, Union

from .errors import InvalidPolicy, InvalidQuantum

if TYPE_CHECKING:
    from .models import Process


class Policy(IntEnum):
    FCFS = 1
    SJF = 2
    SRTN = 3
    RR = 4

    @property
    def title(self) -> str:
        return _TITLES[self]

    @property
    def needs_quantum(self) -> bool:
        return self is Policy.RR

    @classmethod
    def parse(cls, value: Union[int, str, "Policy"]) -> "Policy":
        """
        Accept a numeric identifier (1-4, also as a string) or a policy name.
        """
        if isinstance(value, Policy):
            return value

        if isinstance(value, str):
            key = value.strip().lower()
            if key in _ALIASES:
                return _ALIASES[key]
            try:
                value = int(key)
            except ValueError:
                raise InvalidPolicy(f"Unknown scheduling policy '{value}'") from None

        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidPolicy(f"Unknown scheduling policy {value!r}")

        try:
            return cls(value)
        except ValueError:
            raise InvalidPolicy(f"Invalid scheduling policy {value} (expected 1-4)") from None


_TITLES = {
    Policy.FCFS: "First Come First Serve (FCFS)",
    Policy.SJF: "Shortest Job First (SJF)",
    Policy.SRTN: "Preemptive Shortest Job First (SRTN)",
    Policy.RR: "Round Robin",
}

_ALIASES = {
    "fcfs": Policy.FCFS,
    "sjf": Policy.SJF,
    "srtn": Policy.SRTN,
    "srtf": Policy.SRTN,
    "rr": Policy.RR,
}


class FifoOrdering:
    """Insert at the tail; FCFS and RR."""

    name = "fifo"

    def insertion_index(self, entries: list, process: Process) -> int:
        return len(entries)


class ShortestRemainingOrdering:
    """
    Insert before the first entry with a strictly greater remaining time.

    Equal remaining times keep their enqueue order.
    """

    name = "shortest-remaining"

    def insertion_index(self, entries: list, process: Process) -> int:
        for idx, other in enumerate(entries):
            if other.remaining_time > process.remaining_time:
                return idx
        return len(entries)


class NoPreemption:
    """The running process keeps the CPU until it finishes or blocks."""

    def dispatched(self) -> None:
        pass

    def elapse(self) -> None:
        pass

    def expired(self) -> bool:
        return False

    def reset(self) -> None:
        pass

    def preempts(self, running: Process, candidate: Process) -> bool:
        return False


class ShortestRemainingPreemption(NoPreemption):
    def preempts(self, running: Process, candidate: Process) -> bool:
        return candidate.remaining_time < running.remaining_time


class QuantumPreemption(NoPreemption):
    """Round Robin time slicing; the quantum restarts on every dispatch."""

    def __init__(self, quantum: int) -> None:
        self.quantum = quantum
        self.remaining = quantum

    def dispatched(self) -> None:
        self.reset()

    def elapse(self) -> None:
        self.remaining -= 1

    def expired(self) -> bool:
        return self.remaining <= 0

    def reset(self) -> None:
        self.remaining = self.quantum


def ordering_for(policy: Policy):
    if policy in (Policy.SJF, Policy.SRTN):
        return ShortestRemainingOrdering()
    return FifoOrdering()


def preemption_for(policy: Policy, quantum: Optional[int] = None):
    if policy is Policy.RR:
        if quantum is None or isinstance(quantum, bool) or quantum <= 0:
            raise InvalidQuantum("Round Robin requires a positive quantum (use --quantum)")
        return QuantumPreemption(quantum)
    if policy is Policy.SRTN:
        return ShortestRemainingPreemption()
    return NoPreemption()
