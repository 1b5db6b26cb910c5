"""Judge agent entity."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict

from ...constants import MAX_SCORE, MIN_SCORE
from ..exceptions import ValidationError


@dataclass(frozen=True)
class AgentReputation:
    """Reputation record of a judge agent."""

    average_rating: float = 0.0
    completed_judgments: int = 0
    success_rate: float = 1.0

    def __post_init__(self):
        """Validate reputation values."""
        if not (MIN_SCORE <= self.average_rating <= MAX_SCORE):
            raise ValidationError(
                f"Average rating must be between {MIN_SCORE} and {MAX_SCORE}, "
                f"got {self.average_rating}"
            )

        if self.completed_judgments < 0:
            raise ValidationError("Completed judgments cannot be negative")

        if not (0 <= self.success_rate <= 1):
            raise ValidationError("Success rate must be between 0 and 1")

    def is_new(self) -> bool:
        """Check if the agent has never completed a judgment."""
        return self.completed_judgments == 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AgentReputation":
        """Create from dictionary representation."""
        return cls(
            average_rating=float(data.get("average_rating", 0.0)),
            completed_judgments=int(data.get("completed_judgments", 0)),
            success_rate=float(data.get("success_rate", 1.0)),
        )


@dataclass(frozen=True)
class Agent:
    """Judge agent taking part in an evaluation.

    Agents are owned by an external registry; within one evaluation they are
    immutable and referenced by ``agent_id``.
    """

    agent_id: str
    name: str = ""
    reputation: AgentReputation = field(default_factory=AgentReputation)
    fee_per_judgment: Decimal = Decimal("0")
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        """Validate agent after creation."""
        if not self.agent_id or not self.agent_id.strip():
            raise ValidationError("Agent ID cannot be empty")

        if not isinstance(self.fee_per_judgment, Decimal):
            object.__setattr__(self, "fee_per_judgment", Decimal(str(self.fee_per_judgment)))

        if self.fee_per_judgment < 0:
            raise ValidationError(f"Agent {self.agent_id} fee cannot be negative")

    @property
    def display_name(self) -> str:
        return self.name or self.agent_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "agent_id": self.agent_id,
            "name": self.name,
            "reputation": {
                "average_rating": self.reputation.average_rating,
                "completed_judgments": self.reputation.completed_judgments,
                "success_rate": self.reputation.success_rate,
            },
            "fee_per_judgment": str(self.fee_per_judgment),
            "metadata": self.metadata.copy(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Agent":
        """Create from dictionary representation."""
        return cls(
            agent_id=data["agent_id"],
            name=data.get("name", ""),
            reputation=AgentReputation.from_dict(data.get("reputation", {})),
            fee_per_judgment=Decimal(str(data.get("fee_per_judgment", "0"))),
            metadata=data.get("metadata", {}),
        )
