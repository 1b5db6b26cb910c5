"""Evaluation progress entity."""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..value_objects.evaluation_status import EvaluationStatus


@dataclass
class EvaluationProgress:
    """Live view of one evaluation, updated only by its orchestrator."""

    total_agents: int
    total_rounds: int
    status: EvaluationStatus = EvaluationStatus.INITIALIZING
    current_round: int = 0
    scores_received: int = 0
    current_scores: Dict[str, float] = field(default_factory=dict)
    variance: Optional[float] = None

    def snapshot(self) -> "EvaluationProgress":
        """Independent copy for observers."""
        return copy.deepcopy(self)

    def completion_ratio(self) -> float:
        """Fraction of planned rounds already started."""
        if self.status == EvaluationStatus.COMPLETED:
            return 1.0
        if self.total_rounds == 0:
            return 0.0
        return min(1.0, self.current_round / self.total_rounds)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "current_round": self.current_round,
            "total_rounds": self.total_rounds,
            "scores_received": self.scores_received,
            "total_agents": self.total_agents,
            "current_scores": dict(self.current_scores),
            "variance": self.variance,
        }
