"""Failure reason codes for evaluations."""

from enum import Enum


class FailureReason(str, Enum):
    """Why an evaluation ended in the failed state."""

    VALIDATION_ERROR = "ValidationError"
    QUOTA_EXCEEDED = "QuotaExceeded"
    MISSING_METADATA = "MissingMetadata"
    DEGENERATE_INPUT = "DegenerateInput"
    NO_SCORES_RECEIVED = "NoScoresReceived"
    CANCELLED = "Cancelled"

    def is_retryable(self) -> bool:
        """Check if resubmitting the same request could succeed."""
        return self in {FailureReason.NO_SCORES_RECEIVED, FailureReason.CANCELLED}

    def __str__(self) -> str:
        return self.value
