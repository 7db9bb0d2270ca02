"""Task execution: lifecycle transitions, the active timer and celebrations."""

from kaamyab.execution.events import CompletionEvent, PlanCompletedEvent, WeekCompletedEvent
from kaamyab.execution.timer import ExecutionTimerController, TimerOutcome

__all__ = [
    "CompletionEvent",
    "ExecutionTimerController",
    "PlanCompletedEvent",
    "TimerOutcome",
    "WeekCompletedEvent",
]
