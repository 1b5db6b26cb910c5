"""Context handed to agents when they revise a score."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class RoundContext:
    """Outcome of the previous round, broadcast before a discussion round.

    ``peer_scores`` holds the other agents' scores without their identities.
    """

    round_number: int
    previous_consensus: float
    previous_variance: float
    algorithm_name: str
    own_previous_score: Optional[float] = None
    peer_scores: List[float] = field(default_factory=list)
