"""Canonical error types for the execution core.

Every rejection raised by the core carries a human-readable ``reason``
that the UI can show as-is. Validation errors are raised before any
mutation, so the plan document is never touched when one of these
propagates.

Move rejection codes:
- TASK_ACTIVE: The task is the one currently being timed
- DESTINATION_LOCKED: Target week comes after the active week
- SOURCE_LOCKED: Source week comes after the active week
- TASK_COMPLETED: Operation not allowed on a done task
- INVALID_INDEX: Destination index is outside the week
"""


class KaamyabError(Exception):
    """Base exception for the execution core.

    Attributes:
        reason: Human-readable explanation
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class PlanInvariantError(KaamyabError):
    """Raised when a plan document violates a structural invariant.

    Attributes:
        code: Error code (e.g., "WEEK_NUMBERING", "EMPTY_PLAN")
        details: List of error detail strings
    """

    def __init__(self, code: str, details: list[str]):
        self.code = code
        self.details = details
        super().__init__(f"{code}: {details}")


class WeekNotFoundError(KaamyabError):
    def __init__(self, week_index: int):
        self.week_index = week_index
        super().__init__(f"Week {week_index} not found")


class TaskNotFoundError(KaamyabError):
    def __init__(self, week_index: int, task_index: int):
        self.week_index = week_index
        self.task_index = task_index
        super().__init__(f"Task {task_index} in week {week_index} not found")


class InvalidTransitionError(KaamyabError):
    """Raised when a lifecycle transition is not legal from the current state."""

    def __init__(self, action: str, state: str):
        self.action = action
        self.state = state
        super().__init__(f"Cannot {action} a task that is {state}")


class ConflictError(KaamyabError):
    """Raised when starting a task while another task is doing."""

    def __init__(self, active_task_title: str, reason: str | None = None):
        self.active_task_title = active_task_title
        super().__init__(reason or f'"{active_task_title}" is already in progress')


class TimerConflictError(ConflictError):
    """Raised by the timer controller when an active timer already exists.

    Carries enough context for the caller to offer pause-and-switch or
    complete-and-switch.

    Attributes:
        active_task_title: Title of the task currently being timed
        active_week_index: Week index of the running task
        active_task_index: Task index of the running task
    """

    def __init__(self, active_task_title: str, active_week_index: int, active_task_index: int):
        self.active_week_index = active_week_index
        self.active_task_index = active_task_index
        super().__init__(
            active_task_title,
            f'"{active_task_title}" is already running. Pause or complete it before starting another task.',
        )


class MoveRejectedError(KaamyabError):
    """Raised when a move, reorder, add or split request fails validation.

    Attributes:
        code: Rejection code (see module docstring)
    """

    def __init__(self, code: str, reason: str):
        self.code = code
        super().__init__(reason)


class PlanNotFoundError(KaamyabError):
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"No plan found for user {user_id}")


class PersistenceError(KaamyabError):
    """Raised by a plan store when a write or read fails."""


class PlanServiceError(KaamyabError):
    """Raised when the plan generation/extension service call fails."""

    def __init__(self, reason: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(reason)
