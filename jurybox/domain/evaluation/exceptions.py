"""Exceptions for evaluation domain."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .entities.evaluation_transcript import EvaluationTranscript
    from .value_objects.failure_reason import FailureReason


class EvaluationDomainError(Exception):
    """Base exception for evaluation domain."""

    pass


class ValidationError(EvaluationDomainError):
    """Raised when an evaluation request is malformed or out of bounds."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field_name = field_name


class InvalidStateTransition(EvaluationDomainError):
    """Raised when invalid state transition is attempted."""

    def __init__(
        self, message: str, from_state: Optional[str] = None, to_state: Optional[str] = None
    ):
        super().__init__(message)
        self.from_state = from_state
        self.to_state = to_state


class NoScoresReceivedError(EvaluationDomainError):
    """Raised when a scoring round ends without a single response."""

    def __init__(self, round_number: int):
        super().__init__(f"No agent responded in round {round_number}")
        self.round_number = round_number


class SettlementReconciliationError(EvaluationDomainError):
    """Raised when usage was recorded but the billing notifier failed.

    The recorded usage stands; settlement must be retried out-of-band.
    """

    def __init__(self, message: str, request_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.request_id = request_id


class EvaluationFailedError(EvaluationDomainError):
    """Raised on demand for an evaluation that ended in the failed state."""

    def __init__(
        self,
        message: str,
        reason: "FailureReason",
        transcript: Optional["EvaluationTranscript"] = None,
    ):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.transcript = transcript
