"""Consensus method value object."""

from enum import Enum
from typing import Optional

from ...constants import DEFAULT_CONSENSUS_METHOD
from ..exceptions import UnknownConsensusMethodError


class ConsensusMethod(str, Enum):
    """Closed set of consensus algorithms."""

    SIMPLE_AVERAGE = "simple_average"
    WEIGHTED_AVERAGE = "weighted_average"
    MEDIAN = "median"
    TRIMMED_MEAN = "trimmed_mean"
    MAJORITY_VOTING = "majority_voting"
    ITERATIVE_CONVERGENCE = "iterative_convergence"
    DELPHI_METHOD = "delphi_method"

    @classmethod
    def from_name(cls, name: Optional[str]) -> "ConsensusMethod":
        """Resolve a method by name.

        An unspecified name selects the default method; an unrecognised one is
        rejected.
        """
        if isinstance(name, ConsensusMethod):
            return name

        if name is None or not str(name).strip():
            return cls(DEFAULT_CONSENSUS_METHOD)

        normalized = str(name).strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            raise UnknownConsensusMethodError(str(name))

    def requires_agents(self) -> bool:
        """Check if the method needs agent reputation data."""
        return self in {ConsensusMethod.WEIGHTED_AVERAGE, ConsensusMethod.DELPHI_METHOD}

    def is_multi_round(self) -> bool:
        """Check if the method is realised by repeated discussion rounds."""
        return self in {ConsensusMethod.ITERATIVE_CONVERGENCE, ConsensusMethod.DELPHI_METHOD}

    def __str__(self) -> str:
        return self.value
