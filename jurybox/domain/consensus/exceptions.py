"""Exceptions for consensus domain."""


class ConsensusDomainError(Exception):
    """Base exception for consensus domain."""

    pass


class ValidationError(ConsensusDomainError):
    """Raised when consensus input or configuration is invalid."""

    pass


class UnknownConsensusMethodError(ValidationError):
    """Raised when a consensus method name is not recognised."""

    def __init__(self, method: str):
        super().__init__(f"Unknown consensus method: {method}")
        self.method = method


class ConsensusCalculationError(ConsensusDomainError):
    """Raised when consensus calculation fails."""

    pass


class MissingMetadataError(ConsensusCalculationError):
    """Raised when an algorithm needs agent reputation data that was not supplied."""

    pass


class DegenerateInputError(ConsensusCalculationError):
    """Raised when the input leaves nothing to aggregate."""

    pass
