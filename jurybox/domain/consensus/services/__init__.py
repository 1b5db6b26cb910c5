"""Services for consensus domain."""

from .consensus_algorithm import (
    ConsensusAlgorithm,
    MajorityVoting,
    Median,
    SimpleAverage,
    TrimmedMean,
    WeightedAverage,
)
from .consensus_engine import ConsensusEngine

__all__ = [
    "ConsensusAlgorithm",
    "ConsensusEngine",
    "SimpleAverage",
    "WeightedAverage",
    "Median",
    "TrimmedMean",
    "MajorityVoting",
]
