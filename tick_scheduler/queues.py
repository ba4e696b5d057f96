from __future__ import annotations

from typing import Iterator, List, Optional

from .models import Process
from .policies import FifoOrdering


class ReadyQueue:
    """
    Processes waiting for the CPU, kept in the order the policy dictates.

    The ordering strategy only decides where a newcomer is inserted; the
    queue is never re-sorted.
    """

    def __init__(self, ordering=None) -> None:
        self.ordering = ordering or FifoOrdering()
        self._entries: List[Process] = []

    def enqueue(self, process: Process) -> None:
        idx = self.ordering.insertion_index(self._entries, process)
        self._entries.insert(idx, process)

    def dequeue_front(self) -> Process:
        if not self._entries:
            raise IndexError("dequeue from an empty ready queue")
        return self._entries.pop(0)

    def peek_front(self) -> Process:
        if not self._entries:
            raise IndexError("peek into an empty ready queue")
        return self._entries[0]

    def is_empty(self) -> bool:
        return not self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Process]:
        return iter(list(self._entries))


class BlockedQueue:
    """Processes doing simulated I/O, ascending by blocked time left."""

    def __init__(self) -> None:
        self._entries: List[Process] = []

    def enqueue(self, process: Process, duration: Optional[int] = None) -> None:
        if duration is not None:
            process.blocked_time = duration
        for idx, other in enumerate(self._entries):
            if other.blocked_time > process.blocked_time:
                self._entries.insert(idx, process)
                return
        self._entries.append(process)

    def age_all(self) -> None:
        for p in self._entries:
            p.blocked_time -= 1

    def release_ready(self) -> List[Process]:
        released: List[Process] = []
        while self._entries and self._entries[0].blocked_time <= 0:
            released.append(self._entries.pop(0))
        return released

    def is_empty(self) -> bool:
        return not self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Process]:
        return iter(list(self._entries))
