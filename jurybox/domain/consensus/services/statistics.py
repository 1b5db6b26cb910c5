"""Statistical primitives for consensus scoring.

All functions are pure. Variance is the population variance (mean squared
deviation) throughout.
"""

import math
from typing import Mapping, Sequence

from ...constants import CONFIDENCE_DECAY, DEFAULT_OUTLIER_Z_THRESHOLD
from ..entities.agent import AgentReputation
from ..value_objects.outlier_report import OutlierReport


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0 for an empty input."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def variance(values: Sequence[float], center: float) -> float:
    """Mean squared deviation of ``values`` around ``center``; 0 for an empty input."""
    if not values:
        return 0.0
    return sum((value - center) ** 2 for value in values) / len(values)


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation around the mean."""
    return math.sqrt(variance(values, mean(values)))


def confidence(score_variance: float) -> float:
    """Confidence heuristic in [0, 1] that decays linearly with variance.

    This is a fixed rule of thumb, not a statistical guarantee.
    """
    return max(0.0, 1.0 - score_variance / CONFIDENCE_DECAY)


def agent_weight(reputation: AgentReputation) -> float:
    """Reputation-based weight of an agent.

    ``(rating / 10) * (1 + ln(completed + 1) / 5) * success_rate``. An agent
    with a zero rating weighs 0, so callers must guard the total weight.
    """
    rating_weight = reputation.average_rating / 10
    experience_weight = 1 + math.log(reputation.completed_judgments + 1) / 5
    return rating_weight * experience_weight * reputation.success_rate


def detect_outliers(
    scores: Mapping[str, float], z_threshold: float = DEFAULT_OUTLIER_Z_THRESHOLD
) -> OutlierReport:
    """Flag agents whose z-score reaches ``z_threshold``.

    Uses the population mean and standard deviation of all scores. When every
    score is identical nothing is flagged.
    """
    values = list(scores.values())
    center = mean(values)
    std_dev = math.sqrt(variance(values, center))

    outliers = []
    clean_scores = {}

    for agent_id, score in scores.items():
        if std_dev > 0 and abs(score - center) / std_dev >= z_threshold:
            outliers.append(agent_id)
        else:
            clean_scores[agent_id] = score

    return OutlierReport(outlier_ids=outliers, clean_scores=clean_scores)


def convergence_delta(
    initial_scores: Mapping[str, float], final_scores: Mapping[str, float]
) -> float:
    """Relative variance reduction between two score sets, in [0, 1].

    Returns 1 when the initial scores already agree.
    """
    initial_values = list(initial_scores.values())
    final_values = list(final_scores.values())

    initial_variance = variance(initial_values, mean(initial_values))
    final_variance = variance(final_values, mean(final_values))

    if initial_variance == 0:
        return 1.0

    return max(0.0, (initial_variance - final_variance) / initial_variance)
