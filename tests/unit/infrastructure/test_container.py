"""Unit tests for the service container."""

import logging
from decimal import Decimal

import pytest

from jurybox.application.dto.evaluation_request_dto import EvaluationConfigDTO
from jurybox.application.interfaces.agent_scoring_provider import AgentScoringProvider
from jurybox.domain.consensus.value_objects.consensus_settings import ConsensusSettings
from jurybox.domain.evaluation.value_objects.agent_score import AgentScore
from jurybox.infrastructure.config import AppConfig
from jurybox.infrastructure.container import Container
from jurybox.infrastructure.monitoring.structured_logging import context_manager
from jurybox.infrastructure.persistence.database import DatabaseConfig
from jurybox.infrastructure.persistence.repositories.in_memory_quota_repository import (
    InMemoryQuotaRepository,
)
from jurybox.infrastructure.persistence.repositories.quota_repository_impl import (
    SqlAlchemyQuotaRepository,
)
from tests.factories import AgentFactory


class ContextRecordingProvider(AgentScoringProvider):
    """Scores 7 and remembers the log context seen while scoring."""

    def __init__(self):
        self.contexts = []

    async def score(self, agent, content, criteria, context=None):
        self.contexts.append(context_manager.get_context())
        return AgentScore(score=7.0, rationale="fine")


class TestContainer:
    """Test cases for Container wiring."""

    def test_defaults_to_in_memory_store(self):
        container = Container()

        assert isinstance(container.quota_repository, InMemoryQuotaRepository)
        assert container.database is None
        assert container.quota_gate.repository is container.quota_repository

    @pytest.mark.asyncio
    async def test_database_config_selects_sql_store(self, tmp_path):
        config = AppConfig(
            database=DatabaseConfig(database_url=f"sqlite+aiosqlite:///{tmp_path}/quota.db")
        )
        container = Container(config)

        assert isinstance(container.quota_repository, SqlAlchemyQuotaRepository)
        assert container.database is not None
        await container.close()

    def test_settings_flow_into_services(self):
        config = AppConfig(consensus=ConsensusSettings(trim_percent=0.2))
        container = Container(config)

        assert container.consensus_engine.settings.trim_percent == 0.2
        assert container.quota_gate.settings is config.quota

    def test_build_request_uses_configured_defaults(self):
        evaluation = EvaluationConfigDTO(consensus_method="median")
        container = Container(AppConfig(evaluation=evaluation))

        request = container.build_request("0.0.1001", "content", [AgentFactory()])
        overridden = container.build_request(
            "0.0.1001", "content", [AgentFactory()], config=EvaluationConfigDTO()
        )

        assert request.config is evaluation
        assert overridden.config.consensus_method == "simple_average"

    @pytest.mark.asyncio
    async def test_evaluate_runs_with_log_context(self):
        container = Container()
        provider = ContextRecordingProvider()
        request = container.build_request(
            "0.0.1001", "content", AgentFactory.build_batch(2, fee_per_judgment=Decimal("2"))
        )

        output = await container.evaluate(request, provider)

        assert output.is_successful
        assert output.billed_amount == Decimal("4")
        assert all(context.evaluation_id == request.request_id for context in provider.contexts)
        assert context_manager.get_context() is None

        status = await container.quota_gate.get_quota_status("0.0.1001")
        assert status.current_usage == Decimal("4")

    def test_from_env(self, monkeypatch):
        monkeypatch.delenv("JURYBOX_DATABASE_URL", raising=False)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("JURYBOX_CONSENSUS_METHOD", "median")

        container = Container.from_env()
        try:
            assert container.config.evaluation.consensus_method == "median"
            assert isinstance(container.quota_repository, InMemoryQuotaRepository)
        finally:
            package_logger = logging.getLogger("jurybox")
            for handler in list(package_logger.handlers):
                package_logger.removeHandler(handler)
                handler.close()
