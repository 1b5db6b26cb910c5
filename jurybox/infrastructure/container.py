"""Explicit wiring of the services shared across evaluations."""

import logging
from typing import List, Optional

from ..application.dto.evaluation_request_dto import EvaluationRequestDTO, OrchestratorOutputDTO
from ..application.interfaces.agent_scoring_provider import AgentScoringProvider
from ..application.interfaces.settlement_notifier import SettlementNotifier
from ..application.services.evaluation.evaluation_orchestrator import EvaluationOrchestrator
from ..application.services.evaluation.round_executor import RoundExecutor
from ..application.services.quota.quota_gate import QuotaGate
from ..domain.consensus.entities.agent import Agent
from ..domain.consensus.services.consensus_engine import ConsensusEngine
from ..domain.quota.repositories.quota_repository import QuotaRepository
from .config import AppConfig
from .monitoring.structured_logging import log_context, setup_logging
from .persistence.database import DatabaseManager
from .persistence.repositories.in_memory_quota_repository import InMemoryQuotaRepository
from .persistence.repositories.quota_repository_impl import SqlAlchemyQuotaRepository

logger = logging.getLogger(__name__)


class Container:
    """Builds the quota gate and consensus engine once and hands them out.

    Orchestrators are created per request; everything else is shared.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        repository: Optional[QuotaRepository] = None,
    ):
        self.config = config or AppConfig()
        self.database: Optional[DatabaseManager] = None

        if repository is None:
            if self.config.database is not None:
                self.database = DatabaseManager(self.config.database)
                repository = SqlAlchemyQuotaRepository(
                    self.database.get_async_session_factory()
                )
            else:
                repository = InMemoryQuotaRepository()

        self.quota_repository = repository
        self.quota_gate = QuotaGate(repository, settings=self.config.quota)
        self.consensus_engine = ConsensusEngine(settings=self.config.consensus)

        logger.debug(
            f"Container ready with {type(repository).__name__} and "
            f"{len(ConsensusEngine.supported_methods())} consensus methods"
        )

    @classmethod
    def from_env(cls) -> "Container":
        """Build from environment configuration and set up logging."""
        config = AppConfig.from_env()
        setup_logging(config.logging)
        return cls(config)

    def create_orchestrator(
        self,
        scoring_provider: AgentScoringProvider,
        settlement_notifier: Optional[SettlementNotifier] = None,
    ) -> EvaluationOrchestrator:
        """Create a single-use orchestrator."""
        return EvaluationOrchestrator(
            quota_gate=self.quota_gate,
            consensus_engine=self.consensus_engine,
            round_executor=RoundExecutor(scoring_provider),
            settlement_notifier=settlement_notifier,
        )

    def build_request(
        self, user_address: str, content: str, agents: List[Agent], **kwargs
    ) -> EvaluationRequestDTO:
        """Request carrying the configured evaluation defaults."""
        kwargs.setdefault("config", self.config.evaluation)
        return EvaluationRequestDTO(
            user_address=user_address, content=content, agents=agents, **kwargs
        )

    async def evaluate(
        self,
        request: EvaluationRequestDTO,
        scoring_provider: AgentScoringProvider,
        settlement_notifier: Optional[SettlementNotifier] = None,
    ) -> OrchestratorOutputDTO:
        """Run one request with its identity attached to the log context."""
        orchestrator = self.create_orchestrator(scoring_provider, settlement_notifier)
        with log_context(evaluation_id=request.request_id, user_address=request.user_address):
            return await orchestrator.run(request)

    async def close(self) -> None:
        """Release database connections."""
        if self.database is not None:
            await self.database.close()
