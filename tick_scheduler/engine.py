"""
Discrete-tick simulation engine.

One loop drives all four policies. Each tick, in order:

1. charge one unit of CPU time to the running process (and the RR quantum);
2. age the blocked queue;
3. fast-forward the clock if the machine has nothing at all to do;
4. admit every event due at this tick (arrivals, block requests);
5. retire the running process if it has no time left;
6. dispatch the ready queue head onto an idle CPU;
7. handle Round Robin quantum expiry;
8. move finished I/O back to the ready queue, dispatching onto an idle CPU;
9. advance the clock.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union

from .metrics import build_result
from .models import BlockRequest, EventRecord, Process, ProcessTable, ScheduledSlice, ScheduleResult
from .policies import Policy, ordering_for, preemption_for
from .queues import BlockedQueue, ReadyQueue

logger = logging.getLogger(__name__)


class SimulationEngine:
    def __init__(self, table: ProcessTable, policy: Union[Policy, int, str], quantum: Optional[int] = None) -> None:
        self.table = table
        self.policy = Policy.parse(policy)
        self.quantum = quantum if self.policy.needs_quantum else None
        self.preemption = preemption_for(self.policy, quantum)

        self.clock = 0
        self.running: Optional[Process] = None
        self.ready = ReadyQueue(ordering_for(self.policy))
        self.blocked = BlockedQueue()
        self.timeline: List[ScheduledSlice] = []

        self._pending = list(table.admissions)
        self._cursor = 0

    @property
    def cpu_idle(self) -> bool:
        return self.running is None

    def has_work(self) -> bool:
        return (
            self._cursor < len(self._pending)
            or self.running is not None
            or not self.ready.is_empty()
            or not self.blocked.is_empty()
        )

    def run(self) -> ScheduleResult:
        logger.debug("Executing %s", self.policy.title)
        while self.has_work():
            self.step()
        return build_result(self.table, self.policy, self.quantum, self.timeline)

    def step(self) -> None:
        """Advance the simulation by exactly one tick."""
        if self.running is not None:
            self.running.remaining_time -= 1
            self.preemption.elapse()

        self.blocked.age_all()

        self._skip_idle_time()
        self._admit_due_events()

        if self.running is not None and self.running.remaining_time == 0:
            self._complete()

        if self.cpu_idle and not self.ready.is_empty():
            self._dispatch()

        if self.running is not None and self.preemption.expired():
            if self.ready.is_empty():
                self.preemption.reset()
            else:
                logger.debug("Process %d quantum expired at %d", self.running.pid, self.clock)
                self.ready.enqueue(self.running)
                self.running = None
                self._dispatch()

        self._release_unblocked()

        self._record_tick()
        self.clock += 1

    def _skip_idle_time(self) -> None:
        if not (self.cpu_idle and self.ready.is_empty() and self.blocked.is_empty()):
            return
        if self._cursor >= len(self._pending):
            return
        due = self._pending[self._cursor].arrival_time
        if due > self.clock:
            logger.debug("CPU idle from %d to %d", self.clock, due)
            self.clock = due

    def _admit_due_events(self) -> None:
        while self._cursor < len(self._pending) and self._pending[self._cursor].arrival_time == self.clock:
            event = self._pending[self._cursor]
            self._cursor += 1
            if isinstance(event, BlockRequest):
                self._block_running(event)
            else:
                self._admit(event)

    def _block_running(self, request: BlockRequest) -> None:
        if self.running is None:
            logger.debug("Block request %d at %d found the CPU idle; ignored", request.rid, self.clock)
            return

        if self.running.remaining_time > 0:
            process = self.running
            self.running = None
            self.blocked.enqueue(process, request.duration)
            logger.debug("Process %d was blocked at %d!", process.pid, self.clock)
        else:
            self._complete()

        if not self.ready.is_empty():
            self._dispatch()

    def _admit(self, process: Process) -> None:
        self.ready.enqueue(process)
        self._maybe_preempt()

    def _maybe_preempt(self) -> None:
        if self.running is None or self.ready.is_empty():
            return
        if self.preemption.preempts(self.running, self.ready.peek_front()):
            logger.debug(
                "Process %d preempted by process %d at %d",
                self.running.pid,
                self.ready.peek_front().pid,
                self.clock,
            )
            self.ready.enqueue(self.running)
            self.running = None
            self._dispatch()

    def _release_unblocked(self) -> None:
        for process in self.blocked.release_ready():
            logger.debug("Process %d was unblocked at %d!", process.pid, self.clock)
            self._admit(process)

        if self.cpu_idle and not self.ready.is_empty():
            self._dispatch()

    def _dispatch(self) -> None:
        process = self.ready.dequeue_front()
        if process.first_execution:
            process.first_execution = False
            process.start_time = self.clock
            process.response_time = self.clock - process.arrival_time
        self.running = process
        self.preemption.dispatched()
        logger.debug("Process %d dispatched at %d", process.pid, self.clock)

    def _complete(self) -> None:
        process = self.running
        process.completion_time = self.clock
        process.turnaround_time = self.clock - process.arrival_time
        process.waiting_time = process.turnaround_time - process.burst_time
        process.is_terminated = True
        self.running = None
        logger.debug("Process %d completed at %d", process.pid, self.clock)

    def _record_tick(self) -> None:
        if self.running is None:
            return
        last = self.timeline[-1] if self.timeline else None
        if last is not None and last.pid == self.running.pid and last.end_time == self.clock:
            last.end_time = self.clock + 1
        else:
            self.timeline.append(ScheduledSlice(pid=self.running.pid, start_time=self.clock, end_time=self.clock + 1))


def simulate(
    records: Union[ProcessTable, Iterable[EventRecord]],
    policy: Union[Policy, int, str],
    quantum: Optional[int] = None,
) -> ScheduleResult:
    """
    Run one simulation over loader records (or a ready-made ProcessTable).
    """
    if isinstance(records, ProcessTable):
        table = records
    else:
        table = ProcessTable.from_records(records)
    return SimulationEngine(table, policy, quantum=quantum).run()
