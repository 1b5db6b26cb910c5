"""Consensus result value object."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from ..exceptions import ValidationError


@dataclass(frozen=True)
class ConsensusResult:
    """Value object representing the consensus of one round of agent scores."""

    final_score: float
    algorithm_name: str
    individual_scores: Dict[str, float]  # agent_id -> score
    confidence: float  # 0-1, heuristic derived from variance
    variance: float
    convergence_rounds: int = 1
    weights: Optional[Dict[str, float]] = None  # agent_id -> weight
    outlier_agents: List[str] = field(default_factory=list)  # excluded from the aggregate
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate consensus result."""
        if not (0 <= self.confidence <= 1):
            raise ValidationError("Confidence must be between 0 and 1")

        if self.variance < 0:
            raise ValidationError("Variance cannot be negative")

        if self.convergence_rounds < 1:
            raise ValidationError("Convergence rounds must be at least 1")

        if not self.algorithm_name:
            raise ValidationError("Algorithm name cannot be empty")

        if self.weights is not None and not set(self.weights).issubset(self.individual_scores):
            raise ValidationError("Weights must only reference scored agents")

    def with_convergence_rounds(self, rounds: int) -> "ConsensusResult":
        """Create a copy carrying the number of rounds actually run."""
        return replace(self, convergence_rounds=rounds)

    def with_outliers(self, outlier_agents: List[str]) -> "ConsensusResult":
        """Create a copy recording which agents were excluded as outliers."""
        return replace(self, outlier_agents=list(outlier_agents))

    def has_outliers(self) -> bool:
        """Check if consensus excluded outlier agents."""
        return len(self.outlier_agents) > 0

    def get_agent_deviations(self) -> Dict[str, float]:
        """Get absolute deviations of each agent from consensus."""
        return {
            agent_id: abs(score - self.final_score)
            for agent_id, score in self.individual_scores.items()
        }

    def get_most_deviant_agent(self) -> Optional[str]:
        """Get agent with largest deviation from consensus."""
        if not self.individual_scores:
            return None

        deviations = self.get_agent_deviations()
        return max(deviations.keys(), key=lambda k: deviations[k])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "final_score": self.final_score,
            "algorithm_name": self.algorithm_name,
            "individual_scores": dict(self.individual_scores),
            "weights": dict(self.weights) if self.weights is not None else None,
            "confidence": self.confidence,
            "variance": self.variance,
            "convergence_rounds": self.convergence_rounds,
            "outlier_agents": list(self.outlier_agents),
            "metadata": self.metadata.copy(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConsensusResult":
        """Create from dictionary representation."""
        weights = data.get("weights")
        return cls(
            final_score=float(data["final_score"]),
            algorithm_name=data["algorithm_name"],
            individual_scores={k: float(v) for k, v in data["individual_scores"].items()},
            weights={k: float(v) for k, v in weights.items()} if weights is not None else None,
            confidence=float(data["confidence"]),
            variance=float(data["variance"]),
            convergence_rounds=int(data.get("convergence_rounds", 1)),
            outlier_agents=list(data.get("outlier_agents", [])),
            metadata=data.get("metadata", {}),
        )

    def __str__(self) -> str:
        """String representation."""
        return (
            f"ConsensusResult(score={self.final_score:.3f}, "
            f"algorithm={self.algorithm_name}, "
            f"variance={self.variance:.3f}, confidence={self.confidence:.3f})"
        )
