"""Data Transfer Objects for application layer."""

from .evaluation_request_dto import (
    EvaluationConfigDTO,
    EvaluationFailureDTO,
    EvaluationRequestDTO,
    IndividualResultDTO,
    OrchestratorOutputDTO,
)

__all__ = [
    "EvaluationConfigDTO",
    "EvaluationFailureDTO",
    "EvaluationRequestDTO",
    "IndividualResultDTO",
    "OrchestratorOutputDTO",
]
