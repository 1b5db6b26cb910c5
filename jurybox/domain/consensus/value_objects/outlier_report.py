"""Outlier detection result value object."""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class OutlierReport:
    """Agents flagged as outliers and the scores left for aggregation."""

    outlier_ids: List[str] = field(default_factory=list)
    clean_scores: Dict[str, float] = field(default_factory=dict)

    def has_outliers(self) -> bool:
        return len(self.outlier_ids) > 0

    def is_outlier(self, agent_id: str) -> bool:
        return agent_id in self.outlier_ids
