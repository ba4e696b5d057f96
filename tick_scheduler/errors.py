from __future__ import annotations


class SchedulerError(Exception):
    """Base class for every error the simulator reports to its caller."""


class InputUnavailable(SchedulerError):
    """The workload source could not be opened or read."""


class InvalidPolicy(SchedulerError, ValueError):
    """Policy identifier outside of FCFS/SJF/SRTN/RR."""


class InvalidQuantum(SchedulerError, ValueError):
    """Round Robin was selected without a positive time quantum."""


class MalformedEvent(SchedulerError, ValueError):
    """An event record breaks ordering or field constraints."""
