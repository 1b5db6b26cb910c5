"""Score set helpers."""

import math
from typing import Dict, Mapping

from ...constants import MAX_SCORE, MIN_SCORE
from ..exceptions import DegenerateInputError, ValidationError

# agent_id -> score for one round
ScoreSet = Dict[str, float]


def validate_score_set(scores: Mapping[str, float]) -> ScoreSet:
    """Validate a round's scores and return a detached float copy."""
    if not scores:
        raise DegenerateInputError("Score set is empty")

    validated: ScoreSet = {}
    for agent_id, score in scores.items():
        if not agent_id:
            raise ValidationError("Score set contains an empty agent ID")

        value = float(score)
        if math.isnan(value) or not (MIN_SCORE <= value <= MAX_SCORE):
            raise ValidationError(
                f"Score for agent {agent_id} must be between {MIN_SCORE} and {MAX_SCORE}, "
                f"got {score}"
            )
        validated[agent_id] = value

    return validated
