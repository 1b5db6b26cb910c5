"""Evaluation application services."""

from .evaluation_orchestrator import EvaluationOrchestrator
from .round_executor import RoundExecutor, RoundOutcome

__all__ = ["EvaluationOrchestrator", "RoundExecutor", "RoundOutcome"]
