"""
Failure taxonomy of the progression engine.

Every precondition violation surfaces as one of these types; the HTTP layer
maps ``status_code`` onto the response.
"""


class ProgressionError(Exception):
    status_code = 500

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail or self.__class__.__name__


class ValidationError(ProgressionError):
    """Malformed input, raised before any side effect."""
    status_code = 422


class NotFound(ProgressionError):
    status_code = 404


class AlreadyCompleted(ProgressionError):
    """The action already has completed_at set. Callers treat this as handled."""
    status_code = 409


class CannotReverseCompleted(ProgressionError):
    status_code = 409


class ActionNotCompleted(ProgressionError):
    """Next-unit lookup requested for an action that is still pending."""
    status_code = 409


class GoalInProgress(ProgressionError):
    status_code = 409


class DailyLimitReached(ProgressionError):
    status_code = 409


class NothingActionable(ProgressionError):
    status_code = 400


class StorageFailure(ProgressionError):
    """Transient infrastructure error. Safe to retry."""
    status_code = 503
