"""Exceptions for quota domain."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .value_objects.quota_check_result import QuotaCheckResult


class QuotaDomainError(Exception):
    """Base exception for quota domain."""

    pass


class QuotaValidationError(QuotaDomainError):
    """Raised when a quota operation receives invalid input."""

    pass


class QuotaExceededError(QuotaDomainError):
    """Raised when a requested spend would exceed the monthly cap."""

    def __init__(self, message: str, check_result: Optional["QuotaCheckResult"] = None):
        super().__init__(message)
        self.message = message
        self.check_result = check_result
