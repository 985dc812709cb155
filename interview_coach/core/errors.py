"""
Error types raised by the session engine.

Every error carries a ``kind`` that the API layer reports to the caller
along with the human-readable message.
"""


class InterviewCoachError(Exception):
    """Base class for all engine errors."""

    kind = "InterviewCoachError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(InterviewCoachError):
    """A required field is missing, empty or out of range."""

    kind = "ValidationError"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class NotFoundError(InterviewCoachError):
    """Unknown session or question for the requesting user."""

    kind = "NotFound"


class ConflictError(InterviewCoachError):
    """The request conflicts with existing state."""

    kind = "Conflict"


class SessionIncompleteError(ConflictError):
    """Overall feedback was requested before every question was answered."""


class GenerationUnavailableError(InterviewCoachError):
    """The generation service timed out, failed, or is unreachable. Retryable."""

    kind = "GenerationUnavailable"


class MalformedResponseError(GenerationUnavailableError):
    """The generation service answered with data that failed validation."""

    kind = "MalformedResponse"


class PersistenceError(InterviewCoachError):
    """The durable store failed; nothing was written."""

    kind = "PersistenceError"


class StateTransitionError(InterviewCoachError):
    """Raised when an invalid state transition is attempted."""

    kind = "StateTransitionError"
