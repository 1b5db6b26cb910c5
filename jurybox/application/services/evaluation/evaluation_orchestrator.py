"""Evaluation orchestrator driving multi-round consensus for one request."""

import asyncio
import logging
from dataclasses import replace
from decimal import Decimal
from typing import Dict, List, Optional

from ....domain.consensus.exceptions import (
    DegenerateInputError,
    MissingMetadataError,
)
from ....domain.consensus.exceptions import ValidationError as ConsensusValidationError
from ....domain.consensus.services.consensus_engine import ConsensusEngine
from ....domain.consensus.services.statistics import (
    convergence_delta,
    detect_outliers,
    standard_deviation,
)
from ....domain.consensus.value_objects.consensus_method import ConsensusMethod
from ....domain.consensus.value_objects.consensus_result import ConsensusResult
from ....domain.consensus.value_objects.outlier_report import OutlierReport
from ....domain.evaluation.entities.evaluation_progress import EvaluationProgress
from ....domain.evaluation.entities.evaluation_transcript import (
    ConversationMessage,
    EvaluationTranscript,
    MessagePhase,
)
from ....domain.evaluation.exceptions import (
    InvalidStateTransition,
    NoScoresReceivedError,
    SettlementReconciliationError,
    ValidationError,
)
from ....domain.evaluation.value_objects.agent_score import AgentScore
from ....domain.evaluation.value_objects.evaluation_status import EvaluationStatus
from ....domain.evaluation.value_objects.failure_reason import FailureReason
from ....domain.evaluation.value_objects.round_context import RoundContext
from ....domain.quota.exceptions import QuotaExceededError
from ....domain.quota.value_objects.quota_reservation import QuotaReservation
from ....domain.quota.value_objects.usage_record import UsageRecord
from ...dto.evaluation_request_dto import (
    EvaluationFailureDTO,
    EvaluationRequestDTO,
    IndividualResultDTO,
    OrchestratorOutputDTO,
)
from ...interfaces.settlement_notifier import SettlementNotifier
from ..quota.cost_calculator import calculate_billed_amount, estimate_evaluation_cost
from ..quota.quota_gate import QuotaGate
from .round_executor import RoundExecutor, RoundOutcome

logger = logging.getLogger(__name__)


class EvaluationOrchestrator:
    """Drives one evaluation request from admission to a final verdict.

    Each instance runs exactly one request. Failures are returned as data on
    the output (status ``failed`` with a reason code) rather than raised;
    quota store errors are the exception and propagate.
    """

    def __init__(
        self,
        quota_gate: QuotaGate,
        consensus_engine: ConsensusEngine,
        round_executor: RoundExecutor,
        settlement_notifier: Optional[SettlementNotifier] = None,
    ):
        self.quota_gate = quota_gate
        self.consensus_engine = consensus_engine
        self.round_executor = round_executor
        self.settlement_notifier = settlement_notifier

        self._cancel_event = asyncio.Event()
        self._started = False
        self._progress: Optional[EvaluationProgress] = None
        self._transcript = EvaluationTranscript()
        self._request: Optional[EvaluationRequestDTO] = None
        self._output: Optional[OrchestratorOutputDTO] = None

        # Per-agent bookkeeping across rounds
        self._latest_scores: Dict[str, AgentScore] = {}
        self._rounds_participated: Dict[str, int] = {}
        self._final_outliers: List[str] = []

    @property
    def progress(self) -> Optional[EvaluationProgress]:
        """Read-only snapshot of the evaluation's progress."""
        return self._progress.snapshot() if self._progress else None

    @property
    def transcript(self) -> EvaluationTranscript:
        return self._transcript

    @property
    def output(self) -> Optional[OrchestratorOutputDTO]:
        """Output of the finished run, None while running."""
        return self._output

    def cancel(self) -> None:
        """Stop waiting on outstanding agents and end the evaluation as cancelled."""
        logger.info("Cancellation requested")
        self._cancel_event.set()

    async def run(self, request: EvaluationRequestDTO) -> OrchestratorOutputDTO:
        """Run the evaluation to a terminal state."""
        if self._started:
            raise InvalidStateTransition(
                "Orchestrator instances run a single request",
                from_state=str(self._progress.status) if self._progress else None,
            )
        self._started = True
        self._request = request

        total_agents = len(request.agents) if request.agents else 0
        total_rounds = request.config.planned_rounds() if total_agents > 1 else 1
        self._progress = EvaluationProgress(total_agents=total_agents, total_rounds=total_rounds)

        logger.info(
            f"Starting evaluation {request.request_id} for {request.user_address} "
            f"with {total_agents} agents"
        )

        reservation: Optional[QuotaReservation] = None
        try:
            try:
                request.validate()
                method = self.consensus_engine.resolve(request.config.consensus_method)
            except (ValidationError, ConsensusValidationError) as e:
                return self._fail(FailureReason.VALIDATION_ERROR, str(e))

            try:
                reservation = await self.quota_gate.admit(
                    request.user_address, estimate_evaluation_cost(request.agents)
                )
            except QuotaExceededError as e:
                return self._fail(FailureReason.QUOTA_EXCEEDED, e.message)

            try:
                consensus = await self._run_rounds(method)
            except NoScoresReceivedError as e:
                return self._fail(FailureReason.NO_SCORES_RECEIVED, str(e))
            except MissingMetadataError as e:
                return self._fail(FailureReason.MISSING_METADATA, str(e))
            except DegenerateInputError as e:
                return self._fail(FailureReason.DEGENERATE_INPUT, str(e))

            if consensus is None:
                return self._fail(FailureReason.CANCELLED, "Evaluation was cancelled")

            return await self._complete(consensus, reservation)

        except asyncio.CancelledError:
            if not self._progress.status.is_terminal():
                self._fail(FailureReason.CANCELLED, "Evaluation task was cancelled")
            raise

        finally:
            if reservation is not None:
                self.quota_gate.release(reservation)

    async def _run_rounds(self, method: ConsensusMethod) -> Optional[ConsensusResult]:
        """Score, aggregate and discuss until converged.

        Returns None when the evaluation was cancelled.
        """
        request = self._request
        config = request.config
        outlier_threshold = (
            config.outlier_z_threshold or self.consensus_engine.settings.outlier_z_threshold
        )

        previous: Optional[ConsensusResult] = None
        previous_scores: Dict[str, float] = {}
        first_scores: Dict[str, float] = {}
        round_number = 0

        while True:
            if self._cancel_event.is_set():
                return None

            round_number += 1
            self._transition(EvaluationStatus.SCORING)
            self._progress.current_round = round_number

            contexts = (
                self._build_contexts(round_number, previous, previous_scores)
                if previous is not None
                else None
            )
            outcome = await self.round_executor.execute_round(
                round_number,
                request.agents,
                request.content,
                request.criteria,
                timeout_seconds=config.round_timeout_seconds,
                contexts=contexts,
                cancel_event=self._cancel_event,
            )

            scores = outcome.scores
            if config.enable_outlier_detection and scores:
                report = detect_outliers(scores, outlier_threshold)
            else:
                report = OutlierReport(outlier_ids=[], clean_scores=dict(scores))

            self._record_round(outcome, report)

            if outcome.cancelled:
                return None

            if not outcome.has_responses():
                raise NoScoresReceivedError(round_number)

            if not first_scores:
                first_scores = scores

            consensus = self.consensus_engine.calculate(
                method,
                report.clean_scores,
                agents=request.agents,
                trim_percent=config.trim_percent,
            ).with_outliers(report.outlier_ids)
            self._final_outliers = list(report.outlier_ids)

            self._transcript.add_message(
                ConversationMessage(
                    phase=MessagePhase.CONSENSUS,
                    content=(
                        f"Round {round_number} consensus {consensus.final_score:.2f} via "
                        f"{consensus.algorithm_name} (variance {consensus.variance:.3f}, "
                        f"spread {standard_deviation(list(scores.values())):.2f}, "
                        f"{len(scores)}/{len(request.agents)} agents scored)"
                    ),
                    score=consensus.final_score,
                )
            )
            self._transcript.set_round_variance(consensus.variance)
            self._progress.variance = consensus.variance

            if self._should_discuss(round_number, consensus.variance):
                self._transition(EvaluationStatus.DISCUSSING)
                self._transcript.add_message(
                    ConversationMessage(
                        phase=MessagePhase.DISCUSSION,
                        content=(
                            f"Variance {consensus.variance:.3f} is above "
                            f"{config.convergence_threshold}; agents are asked to revise "
                            f"their scores around {consensus.final_score:.2f}"
                        ),
                    )
                )
                logger.info(
                    f"Evaluation {request.request_id} round {round_number}: variance "
                    f"{consensus.variance:.3f} above threshold, starting discussion"
                )
                previous = consensus
                previous_scores = scores
                continue

            self._transition(EvaluationStatus.CONVERGING)
            if round_number > 1:
                delta = convergence_delta(first_scores, scores)
                consensus = replace(
                    consensus, metadata={**consensus.metadata, "convergence_delta": delta}
                )
                logger.info(
                    f"Evaluation {request.request_id} converged after {round_number} rounds, "
                    f"variance reduced by {delta:.0%}"
                )
            return consensus.with_convergence_rounds(round_number)

    def _should_discuss(self, round_number: int, variance: float) -> bool:
        config = self._request.config
        return (
            config.enable_discussion
            and len(self._request.agents) > 1
            and round_number < self._progress.total_rounds
            and variance > config.convergence_threshold
        )

    def _build_contexts(
        self, round_number: int, previous: ConsensusResult, previous_scores: Dict[str, float]
    ) -> Dict[str, RoundContext]:
        """Context for each agent; peers are reported by value only."""
        contexts = {}
        for agent in self._request.agents:
            contexts[agent.agent_id] = RoundContext(
                round_number=round_number,
                previous_consensus=previous.final_score,
                previous_variance=previous.variance,
                algorithm_name=previous.algorithm_name,
                own_previous_score=previous_scores.get(agent.agent_id),
                peer_scores=[
                    score
                    for agent_id, score in previous_scores.items()
                    if agent_id != agent.agent_id
                ],
            )
        return contexts

    def _record_round(self, outcome: RoundOutcome, report: OutlierReport) -> None:
        """Append every received score to the transcript and progress."""
        self._transcript.start_round(outcome.round_number)

        for agent in self._request.agents:
            result = outcome.responses.get(agent.agent_id)
            if result is None:
                continue

            self._transcript.add_message(
                ConversationMessage(
                    phase=MessagePhase.SCORING,
                    content=result.rationale,
                    agent_id=agent.agent_id,
                    score=float(result.score),
                    is_outlier=report.is_outlier(agent.agent_id),
                )
            )
            self._latest_scores[agent.agent_id] = result
            self._rounds_participated[agent.agent_id] = (
                self._rounds_participated.get(agent.agent_id, 0) + 1
            )

        self._progress.scores_received = len(outcome.responses)
        self._progress.current_scores = outcome.scores

        if report.has_outliers():
            logger.info(
                f"Round {outcome.round_number} outliers excluded from consensus: "
                f"{', '.join(report.outlier_ids)}"
            )

    async def _complete(
        self, consensus: ConsensusResult, reservation: QuotaReservation
    ) -> OrchestratorOutputDTO:
        """Record usage, notify settlement and assemble the output."""
        request = self._request
        billed = calculate_billed_amount(request.agents, self._rounds_participated.keys())

        await self.quota_gate.record_usage(
            UsageRecord(
                user_address=request.user_address,
                amount=billed,
                task_id=request.request_id,
                description=(
                    f"Consensus evaluation by {len(self._rounds_participated)} agents "
                    f"over {consensus.convergence_rounds} rounds"
                ),
            ),
            reservation,
        )
        self._transition(EvaluationStatus.COMPLETED)

        reconciliation_error = None
        if self.settlement_notifier is not None:
            try:
                await self.settlement_notifier.notify_settlement(
                    request.request_id, request.user_address, billed
                )
            except Exception as e:
                error = SettlementReconciliationError(
                    f"Usage {billed} recorded for {request.request_id} but settlement "
                    f"notification failed: {str(e)}",
                    request_id=request.request_id,
                )
                logger.error(error.message, exc_info=True)
                reconciliation_error = error.message

        logger.info(
            f"Completed evaluation {request.request_id}: score {consensus.final_score:.2f} "
            f"after {consensus.convergence_rounds} rounds, billed {billed}"
        )

        self._output = self._build_output(
            consensus=consensus,
            individual_results=self._build_individual_results(consensus),
            billed_amount=billed,
            reconciliation_error=reconciliation_error,
        )
        return self._output

    def _build_individual_results(self, consensus: ConsensusResult) -> List[IndividualResultDTO]:
        results = []
        for agent in self._request.agents:
            latest = self._latest_scores.get(agent.agent_id)
            rounds = self._rounds_participated.get(agent.agent_id, 0)
            results.append(
                IndividualResultDTO(
                    agent_id=agent.agent_id,
                    final_score=float(latest.score) if latest else None,
                    rationale=latest.rationale if latest else "",
                    rounds_participated=rounds,
                    is_outlier=agent.agent_id in self._final_outliers,
                    deviation=abs(float(latest.score) - consensus.final_score) if latest else None,
                    fee_billed=agent.fee_per_judgment if rounds > 0 else Decimal("0"),
                )
            )
        return results

    def _fail(self, reason: FailureReason, message: str) -> OrchestratorOutputDTO:
        """Move to the failed state and assemble the output."""
        self._transition(EvaluationStatus.FAILED)
        logger.warning(f"Evaluation {self._request.request_id} failed ({reason.value}): {message}")

        self._output = self._build_output(
            failure=EvaluationFailureDTO(reason=reason, message=message)
        )
        return self._output

    def _build_output(self, **kwargs) -> OrchestratorOutputDTO:
        return OrchestratorOutputDTO(
            request_id=self._request.request_id,
            status=self._progress.status,
            progress=self._progress.snapshot(),
            transcript=self._transcript,
            **kwargs,
        )

    def _transition(self, target: EvaluationStatus) -> None:
        current = self._progress.status
        if not current.can_transition_to(target):
            raise InvalidStateTransition(
                f"Cannot transition evaluation from {current} to {target}",
                from_state=str(current),
                to_state=str(target),
            )
        self._progress.status = target
