"""Value objects for evaluation domain."""

from .agent_score import AgentScore
from .evaluation_status import EvaluationStatus
from .failure_reason import FailureReason
from .round_context import RoundContext

__all__ = [
    "AgentScore",
    "EvaluationStatus",
    "FailureReason",
    "RoundContext",
]
