"""Entities for evaluation domain."""

from .evaluation_progress import EvaluationProgress
from .evaluation_transcript import (
    ConversationMessage,
    EvaluationTranscript,
    MessagePhase,
    TranscriptRound,
)

__all__ = [
    "ConversationMessage",
    "EvaluationProgress",
    "EvaluationTranscript",
    "MessagePhase",
    "TranscriptRound",
]
