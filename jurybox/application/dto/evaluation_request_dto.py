"""DTOs for evaluation requests and orchestrator output."""

import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ...domain.consensus.entities.agent import Agent
from ...domain.consensus.exceptions import UnknownConsensusMethodError
from ...domain.consensus.value_objects.consensus_method import ConsensusMethod
from ...domain.consensus.value_objects.consensus_result import ConsensusResult
from ...domain.constants import (
    DEFAULT_CONSENSUS_METHOD,
    DEFAULT_CONVERGENCE_THRESHOLD,
    DEFAULT_CRITERIA,
    DEFAULT_MAX_DISCUSSION_ROUNDS,
    DEFAULT_ROUND_TIMEOUT_MS,
    MAX_DISCUSSION_ROUNDS,
    MAX_ROUND_TIMEOUT_MS,
    MIN_DISCUSSION_ROUNDS,
    MIN_ROUND_TIMEOUT_MS,
)
from ...domain.evaluation.entities.evaluation_progress import EvaluationProgress
from ...domain.evaluation.entities.evaluation_transcript import EvaluationTranscript
from ...domain.evaluation.exceptions import EvaluationFailedError, ValidationError
from ...domain.evaluation.value_objects.evaluation_status import EvaluationStatus
from ...domain.evaluation.value_objects.failure_reason import FailureReason


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class EvaluationConfigDTO:
    """DTO for evaluation configuration.

    Bounds are checked by ``validate`` so that a malformed configuration
    surfaces as a failed evaluation rather than a construction error.
    """

    consensus_method: str = DEFAULT_CONSENSUS_METHOD
    max_discussion_rounds: int = DEFAULT_MAX_DISCUSSION_ROUNDS
    round_timeout_ms: int = DEFAULT_ROUND_TIMEOUT_MS
    convergence_threshold: float = DEFAULT_CONVERGENCE_THRESHOLD
    enable_discussion: bool = False
    enable_outlier_detection: bool = True
    outlier_z_threshold: Optional[float] = None  # engine default when unset
    trim_percent: Optional[float] = None  # engine default when unset

    def validate(self) -> None:
        """Validate configuration parameters."""
        if not (MIN_DISCUSSION_ROUNDS <= self.max_discussion_rounds <= MAX_DISCUSSION_ROUNDS):
            raise ValidationError(
                f"max_discussion_rounds must be between {MIN_DISCUSSION_ROUNDS} and "
                f"{MAX_DISCUSSION_ROUNDS}, got {self.max_discussion_rounds}",
                field_name="max_discussion_rounds",
            )

        if not (MIN_ROUND_TIMEOUT_MS <= self.round_timeout_ms <= MAX_ROUND_TIMEOUT_MS):
            raise ValidationError(
                f"round_timeout_ms must be between {MIN_ROUND_TIMEOUT_MS} and "
                f"{MAX_ROUND_TIMEOUT_MS}, got {self.round_timeout_ms}",
                field_name="round_timeout_ms",
            )

        if self.convergence_threshold < 0:
            raise ValidationError(
                "convergence_threshold cannot be negative", field_name="convergence_threshold"
            )

        if self.outlier_z_threshold is not None and self.outlier_z_threshold <= 0:
            raise ValidationError(
                "outlier_z_threshold must be positive", field_name="outlier_z_threshold"
            )

        if self.trim_percent is not None and not (0 <= self.trim_percent < 0.5):
            raise ValidationError("trim_percent must be in [0, 0.5)", field_name="trim_percent")

        try:
            ConsensusMethod.from_name(self.consensus_method)
        except UnknownConsensusMethodError as e:
            raise ValidationError(str(e), field_name="consensus_method")

    @property
    def round_timeout_seconds(self) -> float:
        return self.round_timeout_ms / 1000

    def planned_rounds(self) -> int:
        """Upper bound on the number of scoring rounds."""
        return self.max_discussion_rounds if self.enable_discussion else 1

    @classmethod
    def from_env(cls) -> "EvaluationConfigDTO":
        """Create configuration from environment variables."""
        return cls(
            consensus_method=os.getenv("JURYBOX_CONSENSUS_METHOD", DEFAULT_CONSENSUS_METHOD),
            max_discussion_rounds=int(
                os.getenv("JURYBOX_MAX_DISCUSSION_ROUNDS", str(DEFAULT_MAX_DISCUSSION_ROUNDS))
            ),
            round_timeout_ms=int(
                os.getenv("JURYBOX_ROUND_TIMEOUT_MS", str(DEFAULT_ROUND_TIMEOUT_MS))
            ),
            convergence_threshold=float(
                os.getenv("JURYBOX_CONVERGENCE_THRESHOLD", str(DEFAULT_CONVERGENCE_THRESHOLD))
            ),
            enable_discussion=_env_flag("JURYBOX_ENABLE_DISCUSSION", False),
            enable_outlier_detection=_env_flag("JURYBOX_ENABLE_OUTLIER_DETECTION", True),
        )


@dataclass(frozen=True)
class EvaluationRequestDTO:
    """DTO for evaluation requests."""

    user_address: str
    content: str
    agents: List[Agent]
    criteria: List[str] = field(default_factory=lambda: list(DEFAULT_CRITERIA))
    config: EvaluationConfigDTO = field(default_factory=EvaluationConfigDTO)
    request_id: str = field(default_factory=lambda: str(uuid4()))

    def validate(self) -> None:
        """Validate request shape and bounds."""
        if not self.request_id or not self.request_id.strip():
            raise ValidationError("Request ID cannot be empty", field_name="request_id")

        if not self.user_address or not self.user_address.strip():
            raise ValidationError("User address cannot be empty", field_name="user_address")

        if not self.content or not self.content.strip():
            raise ValidationError("Content cannot be empty", field_name="content")

        if not self.agents:
            raise ValidationError("At least one agent is required", field_name="agents")

        agent_ids = [agent.agent_id for agent in self.agents]
        if len(agent_ids) != len(set(agent_ids)):
            raise ValidationError("Agent IDs must be unique", field_name="agents")

        self.config.validate()


@dataclass(frozen=True)
class IndividualResultDTO:
    """Outcome of one agent across the whole evaluation."""

    agent_id: str
    final_score: Optional[float]  # None when the agent never scored
    rationale: str
    rounds_participated: int
    is_outlier: bool
    deviation: Optional[float]
    fee_billed: Decimal

    @property
    def participated(self) -> bool:
        return self.rounds_participated > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "final_score": self.final_score,
            "rationale": self.rationale,
            "rounds_participated": self.rounds_participated,
            "is_outlier": self.is_outlier,
            "deviation": self.deviation,
            "fee_billed": str(self.fee_billed),
        }


@dataclass(frozen=True)
class EvaluationFailureDTO:
    """Reason code and message of a failed evaluation."""

    reason: FailureReason
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"reason": self.reason.value, "message": self.message}


@dataclass(frozen=True)
class OrchestratorOutputDTO:
    """Final, immutable outcome of one evaluation request."""

    request_id: str
    status: EvaluationStatus
    progress: EvaluationProgress
    transcript: EvaluationTranscript
    consensus: Optional[ConsensusResult] = None
    individual_results: List[IndividualResultDTO] = field(default_factory=list)
    failure: Optional[EvaluationFailureDTO] = None
    billed_amount: Decimal = Decimal("0")
    reconciliation_error: Optional[str] = None

    @property
    def is_successful(self) -> bool:
        return self.status == EvaluationStatus.COMPLETED

    @property
    def needs_reconciliation(self) -> bool:
        """Check if usage was recorded but settlement was not confirmed."""
        return self.reconciliation_error is not None

    def raise_for_failure(self) -> None:
        """Raise ``EvaluationFailedError`` if the evaluation failed."""
        if self.failure is not None:
            raise EvaluationFailedError(
                f"Evaluation {self.request_id} failed ({self.failure.reason.value}): "
                f"{self.failure.message}",
                reason=self.failure.reason,
                transcript=self.transcript,
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "request_id": self.request_id,
            "status": self.status.value,
            "progress": self.progress.to_dict(),
            "transcript": self.transcript.to_dict(),
            "consensus": self.consensus.to_dict() if self.consensus else None,
            "individual_results": [result.to_dict() for result in self.individual_results],
            "failure": self.failure.to_dict() if self.failure else None,
            "billed_amount": str(self.billed_amount),
            "reconciliation_error": self.reconciliation_error,
        }
