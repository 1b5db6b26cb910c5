"""Agent score value object."""

import math
from dataclasses import dataclass
from typing import Optional

from ...constants import MAX_SCORE, MIN_SCORE
from ..exceptions import ValidationError


@dataclass(frozen=True)
class AgentScore:
    """Score returned by the external scoring provider for one agent."""

    score: float
    rationale: str = ""
    confidence: Optional[float] = None

    def __post_init__(self):
        """Validate score."""
        if self.score is None or math.isnan(float(self.score)):
            raise ValidationError("Score must be a number", field_name="score")

        if not (MIN_SCORE <= float(self.score) <= MAX_SCORE):
            raise ValidationError(
                f"Score must be between {MIN_SCORE} and {MAX_SCORE}, got {self.score}",
                field_name="score",
            )

        if self.confidence is not None and not (0 <= self.confidence <= 1):
            raise ValidationError("Confidence must be between 0 and 1", field_name="confidence")
