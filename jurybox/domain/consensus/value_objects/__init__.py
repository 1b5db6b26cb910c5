"""Value objects for consensus domain."""

from .consensus_method import ConsensusMethod
from .consensus_result import ConsensusResult
from .consensus_settings import ConsensusSettings
from .outlier_report import OutlierReport
from .score_set import ScoreSet, validate_score_set

__all__ = [
    "ConsensusMethod",
    "ConsensusResult",
    "ConsensusSettings",
    "OutlierReport",
    "ScoreSet",
    "validate_score_set",
]
