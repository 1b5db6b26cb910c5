"""Evaluation status value object."""

from enum import Enum
from typing import Set


class EvaluationStatus(Enum):
    """Evaluation lifecycle status enumeration."""

    INITIALIZING = "initializing"
    SCORING = "scoring"
    DISCUSSING = "discussing"
    CONVERGING = "converging"
    COMPLETED = "completed"
    FAILED = "failed"

    def can_transition_to(self, target_status: "EvaluationStatus") -> bool:
        """Check if transition to target status is allowed."""
        valid_transitions = self._get_valid_transitions()
        return target_status in valid_transitions

    def _get_valid_transitions(self) -> Set["EvaluationStatus"]:
        """Get valid transitions from current status."""
        transition_map = {
            EvaluationStatus.INITIALIZING: {EvaluationStatus.SCORING, EvaluationStatus.FAILED},
            EvaluationStatus.SCORING: {
                EvaluationStatus.DISCUSSING,
                EvaluationStatus.CONVERGING,
                EvaluationStatus.FAILED,
            },
            EvaluationStatus.DISCUSSING: {EvaluationStatus.SCORING, EvaluationStatus.FAILED},
            EvaluationStatus.CONVERGING: {EvaluationStatus.COMPLETED, EvaluationStatus.FAILED},
            EvaluationStatus.COMPLETED: set(),  # Terminal state
            EvaluationStatus.FAILED: set(),  # Terminal state
        }
        return transition_map.get(self, set())

    def is_terminal(self) -> bool:
        """Check if this is a terminal status (no further transitions allowed)."""
        return self in {EvaluationStatus.COMPLETED, EvaluationStatus.FAILED}

    def is_active(self) -> bool:
        """Check if evaluation is still running."""
        return not self.is_terminal()

    def __str__(self) -> str:
        """String representation of status."""
        return self.value

    def __repr__(self) -> str:
        """Detailed string representation."""
        return f"EvaluationStatus.{self.name}"
