"""Consensus engine dispatching to the configured algorithm."""

import logging
from dataclasses import replace
from typing import List, Mapping, Optional, Union

from ..entities.agent import Agent
from ..value_objects.consensus_method import ConsensusMethod
from ..value_objects.consensus_result import ConsensusResult
from ..value_objects.consensus_settings import ConsensusSettings
from .consensus_algorithm import (
    ConsensusAlgorithm,
    MajorityVoting,
    Median,
    SimpleAverage,
    TrimmedMean,
    WeightedAverage,
)

logger = logging.getLogger(__name__)


class ConsensusEngine:
    """Stateless entry point for computing consensus by method name.

    Iterative convergence and the Delphi method are realised by the
    orchestrator's round loop; per round they aggregate like simple average and
    weighted average respectively.
    """

    def __init__(self, settings: Optional[ConsensusSettings] = None):
        self.settings = settings or ConsensusSettings()
        self._algorithms = {
            ConsensusMethod.SIMPLE_AVERAGE: SimpleAverage(),
            ConsensusMethod.WEIGHTED_AVERAGE: WeightedAverage(),
            ConsensusMethod.MEDIAN: Median(),
            ConsensusMethod.TRIMMED_MEAN: TrimmedMean(self.settings.trim_percent),
            ConsensusMethod.MAJORITY_VOTING: MajorityVoting(self.settings.majority_threshold),
        }

    @staticmethod
    def supported_methods() -> List[str]:
        """Names accepted by ``calculate``."""
        return [method.value for method in ConsensusMethod]

    def resolve(self, method: Union[str, ConsensusMethod, None]) -> ConsensusMethod:
        """Resolve a method name, failing on unknown names."""
        return ConsensusMethod.from_name(method)

    def calculate(
        self,
        method: Union[str, ConsensusMethod, None],
        scores: Mapping[str, float],
        agents: Optional[List[Agent]] = None,
        trim_percent: Optional[float] = None,
    ) -> ConsensusResult:
        """Calculate consensus for one round of scores.

        ``trim_percent`` overrides the configured trim for a trimmed mean.
        """
        resolved = self.resolve(method)
        if resolved == ConsensusMethod.TRIMMED_MEAN and trim_percent is not None:
            algorithm: ConsensusAlgorithm = TrimmedMean(trim_percent)
        else:
            algorithm = self._get_algorithm(resolved)

        result = algorithm.calculate(scores, agents)

        if result.algorithm_name != resolved.value:
            result = replace(result, algorithm_name=resolved.value)

        logger.debug(
            f"Consensus via {resolved.value}: score={result.final_score:.3f}, "
            f"variance={result.variance:.3f}, agents={len(result.individual_scores)}"
        )
        return result

    def _get_algorithm(self, method: ConsensusMethod) -> ConsensusAlgorithm:
        if method == ConsensusMethod.ITERATIVE_CONVERGENCE:
            return self._algorithms[ConsensusMethod.SIMPLE_AVERAGE]
        elif method == ConsensusMethod.DELPHI_METHOD:
            return self._algorithms[ConsensusMethod.WEIGHTED_AVERAGE]
        return self._algorithms[method]
