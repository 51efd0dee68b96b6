# daymap/errors.py
"""Domain errors raised by the roadmap core."""


class DaymapError(Exception):
    pass


class GenerationFailure(DaymapError):
    """The roadmap generator errored or returned unusable output."""


class FeasibilityCheckFailure(DaymapError):
    """The feasibility check errored. Callers degrade to 'feasible'."""


class NoFurtherDay(DaymapError):
    """Push-to-tomorrow was requested on the last day of the roadmap."""

    def __init__(self, date: str):
        super().__init__(f"No more days in roadmap after {date}")
        self.date = date


class DestructiveConfirmationRequired(DaymapError):
    """A destructive operation was attempted without explicit confirmation."""


class ProjectNotFound(DaymapError):
    def __init__(self, project_id: str):
        super().__init__(f"Project '{project_id}' not found")
        self.project_id = project_id


class TaskNotFound(DaymapError):
    def __init__(self, task_id: str):
        super().__init__(f"Task '{task_id}' not found")
        self.task_id = task_id


class InvalidTransition(DaymapError):
    """An event is not allowed in the negotiation's current state."""


class NegotiationBusy(DaymapError):
    """A negotiation call is already in flight for this draft."""
