"""Consensus algorithms for multi-agent score aggregation."""

import math
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from ...constants import DEFAULT_MAJORITY_THRESHOLD, DEFAULT_TRIM_PERCENT
from ..entities.agent import Agent
from ..exceptions import DegenerateInputError, MissingMetadataError, ValidationError
from ..value_objects.consensus_method import ConsensusMethod
from ..value_objects.consensus_result import ConsensusResult
from ..value_objects.score_set import validate_score_set
from . import statistics


class ConsensusAlgorithm(ABC):
    """Base class for a consensus strategy over one round's scores."""

    method: ConsensusMethod

    @abstractmethod
    def calculate(
        self, scores: Mapping[str, float], agents: Optional[List[Agent]] = None
    ) -> ConsensusResult:
        """Aggregate a score set into a consensus result."""

    def _build_result(
        self,
        final_score: float,
        scores: Dict[str, float],
        score_variance: float,
        weights: Optional[Dict[str, float]] = None,
        score_confidence: Optional[float] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ConsensusResult:
        return ConsensusResult(
            final_score=final_score,
            algorithm_name=self.method.value,
            individual_scores=scores,
            weights=weights,
            confidence=(
                statistics.confidence(score_variance)
                if score_confidence is None
                else score_confidence
            ),
            variance=score_variance,
            convergence_rounds=1,
            metadata=metadata or {},
        )


class SimpleAverage(ConsensusAlgorithm):
    """Equal weight for all agents."""

    method = ConsensusMethod.SIMPLE_AVERAGE

    def calculate(
        self, scores: Mapping[str, float], agents: Optional[List[Agent]] = None
    ) -> ConsensusResult:
        validated = validate_score_set(scores)
        values = list(validated.values())

        final_score = statistics.mean(values)
        score_variance = statistics.variance(values, final_score)

        return self._build_result(final_score, validated, score_variance)


class WeightedAverage(ConsensusAlgorithm):
    """Average weighted by agent reputation.

    A scored agent without a matching ``Agent`` entry gets weight 0 and so
    contributes nothing to the final score.
    """

    method = ConsensusMethod.WEIGHTED_AVERAGE

    def calculate(
        self, scores: Mapping[str, float], agents: Optional[List[Agent]] = None
    ) -> ConsensusResult:
        if agents is None:
            raise MissingMetadataError(
                f"{self.method.value} requires agent reputation data"
            )

        validated = validate_score_set(scores)
        agents_by_id = {agent.agent_id: agent for agent in agents}

        weights: Dict[str, float] = {}
        weighted_sum = 0.0
        for agent_id, score in validated.items():
            agent = agents_by_id.get(agent_id)
            weight = statistics.agent_weight(agent.reputation) if agent else 0.0
            weights[agent_id] = weight
            weighted_sum += score * weight

        total_weight = sum(weights.values())
        if total_weight <= 0:
            raise DegenerateInputError(
                "Weighted average has zero total weight; every scored agent is unrated"
            )

        final_score = weighted_sum / total_weight
        score_variance = statistics.variance(list(validated.values()), final_score)

        return self._build_result(final_score, validated, score_variance, weights=weights)


class Median(ConsensusAlgorithm):
    """Middle score, robust to outliers."""

    method = ConsensusMethod.MEDIAN

    def calculate(
        self, scores: Mapping[str, float], agents: Optional[List[Agent]] = None
    ) -> ConsensusResult:
        validated = validate_score_set(scores)
        values = sorted(validated.values())
        n = len(values)
        mid = n // 2

        if n % 2 == 0:
            final_score = (values[mid - 1] + values[mid]) / 2
        else:
            final_score = values[mid]

        # Variance over every score around the median
        score_variance = statistics.variance(values, final_score)

        return self._build_result(final_score, validated, score_variance)


class TrimmedMean(ConsensusAlgorithm):
    """Drop the extreme scores at each end, then average the rest."""

    method = ConsensusMethod.TRIMMED_MEAN

    def __init__(self, trim_percent: float = DEFAULT_TRIM_PERCENT):
        if not (0 <= trim_percent < 0.5):
            raise ValidationError("trim_percent must be in [0, 0.5)")
        self.trim_percent = trim_percent

    def calculate(
        self, scores: Mapping[str, float], agents: Optional[List[Agent]] = None
    ) -> ConsensusResult:
        validated = validate_score_set(scores)
        values = sorted(validated.values())
        trim_count = math.floor(len(values) * self.trim_percent)

        trimmed_values = values[trim_count : len(values) - trim_count]
        if not trimmed_values:
            raise DegenerateInputError(
                f"Trimming {trim_count} scores from each end of {len(values)} leaves no data"
            )

        final_score = statistics.mean(trimmed_values)
        score_variance = statistics.variance(trimmed_values, final_score)

        return self._build_result(
            final_score,
            validated,
            score_variance,
            metadata={"trim_percent": self.trim_percent, "trim_count": trim_count},
        )


class MajorityVoting(ConsensusAlgorithm):
    """Pass/fail vote against a threshold, for categorical verdicts."""

    method = ConsensusMethod.MAJORITY_VOTING

    def __init__(self, threshold: float = DEFAULT_MAJORITY_THRESHOLD):
        self.threshold = threshold

    def calculate(
        self, scores: Mapping[str, float], agents: Optional[List[Agent]] = None
    ) -> ConsensusResult:
        validated = validate_score_set(scores)
        values = list(validated.values())

        passes = sum(1 for score in values if score >= self.threshold)
        fails = len(values) - passes

        final_score = self.threshold + 2 if passes > fails else self.threshold - 2
        final_score = min(10.0, max(0.0, final_score))
        score_variance = statistics.variance(values, final_score)

        return self._build_result(
            final_score,
            validated,
            score_variance,
            score_confidence=max(passes, fails) / len(values),
            metadata={"threshold": self.threshold, "passes": passes, "fails": fails},
        )
