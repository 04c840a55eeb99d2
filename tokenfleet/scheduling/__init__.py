"""
Scheduling module.

Runs the cycle orchestrator on a fixed daily period with a live countdown.
"""
from .loop import SchedulerLoop, SchedulerState

__all__ = ["SchedulerLoop", "SchedulerState"]
