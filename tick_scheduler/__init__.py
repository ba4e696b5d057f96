"""
Tick scheduler package.

Simulates FCFS, SJF, SRTN and Round Robin CPU scheduling one clock tick at
a time, including processes that block for simulated I/O.
"""

from .engine import SimulationEngine, simulate
from .models import EventRecord, ProcessTable
from .policies import Policy

__all__ = ["EventRecord", "Policy", "ProcessTable", "SimulationEngine", "cli", "simulate"]
