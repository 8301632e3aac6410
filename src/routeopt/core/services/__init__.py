"""
Service layer for routeopt.

Services compose the core packages into the two user-facing actions:
the weekly run and callback handling. They accept typed inputs, return
typed outputs and raise typed exceptions; presentation is the caller's
job.

Modules:
    weekly: WeeklyRunService runs pricing, discovery, optimization and
            opens the approval batch.
    callback: CallbackService advances batches from button presses.
    wiring: Builds production collaborators from configuration.
"""

from routeopt.core.services.callback import CallbackService
from routeopt.core.services.models import CallbackOutcome, RunMode, WeeklyRunResult
from routeopt.core.services.weekly import WeeklyRunService

__all__ = [
    "CallbackOutcome",
    "CallbackService",
    "RunMode",
    "WeeklyRunResult",
    "WeeklyRunService",
]
