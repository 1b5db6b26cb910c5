"""Unit tests for evaluation DTOs."""

from decimal import Decimal

import pytest

from jurybox.application.dto.evaluation_request_dto import (
    EvaluationConfigDTO,
    EvaluationFailureDTO,
    EvaluationRequestDTO,
    OrchestratorOutputDTO,
)
from jurybox.domain.consensus.entities.agent import Agent
from jurybox.domain.constants import DEFAULT_CRITERIA
from jurybox.domain.evaluation.entities.evaluation_progress import EvaluationProgress
from jurybox.domain.evaluation.entities.evaluation_transcript import EvaluationTranscript
from jurybox.domain.evaluation.exceptions import EvaluationFailedError, ValidationError
from jurybox.domain.evaluation.value_objects.evaluation_status import EvaluationStatus
from jurybox.domain.evaluation.value_objects.failure_reason import FailureReason


class TestEvaluationConfigDTO:
    """Test cases for EvaluationConfigDTO."""

    def test_defaults(self):
        config = EvaluationConfigDTO()

        config.validate()
        assert config.consensus_method == "simple_average"
        assert config.max_discussion_rounds == 3
        assert config.round_timeout_ms == 60000
        assert config.round_timeout_seconds == 60.0
        assert config.convergence_threshold == 0.5
        assert not config.enable_discussion
        assert config.enable_outlier_detection

    def test_planned_rounds(self):
        assert EvaluationConfigDTO().planned_rounds() == 1
        config = EvaluationConfigDTO(enable_discussion=True, max_discussion_rounds=4)
        assert config.planned_rounds() == 4

    @pytest.mark.parametrize(
        "kwargs, field_name",
        [
            ({"max_discussion_rounds": 0}, "max_discussion_rounds"),
            ({"max_discussion_rounds": 11}, "max_discussion_rounds"),
            ({"round_timeout_ms": 9999}, "round_timeout_ms"),
            ({"round_timeout_ms": 300001}, "round_timeout_ms"),
            ({"convergence_threshold": -0.1}, "convergence_threshold"),
            ({"outlier_z_threshold": 0}, "outlier_z_threshold"),
            ({"trim_percent": 0.5}, "trim_percent"),
            ({"consensus_method": "coin_flip"}, "consensus_method"),
        ],
    )
    def test_validate_rejects_out_of_bounds(self, kwargs, field_name):
        config = EvaluationConfigDTO(**kwargs)

        with pytest.raises(ValidationError) as exc_info:
            config.validate()

        assert exc_info.value.field_name == field_name

    def test_bounds_are_inclusive(self):
        EvaluationConfigDTO(max_discussion_rounds=1, round_timeout_ms=10000).validate()
        EvaluationConfigDTO(max_discussion_rounds=10, round_timeout_ms=300000).validate()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("JURYBOX_CONSENSUS_METHOD", "median")
        monkeypatch.setenv("JURYBOX_MAX_DISCUSSION_ROUNDS", "5")
        monkeypatch.setenv("JURYBOX_ROUND_TIMEOUT_MS", "20000")
        monkeypatch.setenv("JURYBOX_CONVERGENCE_THRESHOLD", "0.25")
        monkeypatch.setenv("JURYBOX_ENABLE_DISCUSSION", "yes")
        monkeypatch.setenv("JURYBOX_ENABLE_OUTLIER_DETECTION", "false")

        config = EvaluationConfigDTO.from_env()

        assert config.consensus_method == "median"
        assert config.max_discussion_rounds == 5
        assert config.round_timeout_ms == 20000
        assert config.convergence_threshold == 0.25
        assert config.enable_discussion
        assert not config.enable_outlier_detection


class TestEvaluationRequestDTO:
    """Test cases for EvaluationRequestDTO."""

    def test_defaults(self):
        request = EvaluationRequestDTO(
            user_address="0.0.1001", content="text", agents=[Agent(agent_id="a")]
        )

        request.validate()
        assert request.criteria == DEFAULT_CRITERIA
        assert request.criteria is not DEFAULT_CRITERIA
        assert request.request_id

    def test_request_ids_are_unique(self):
        first = EvaluationRequestDTO(user_address="u", content="c", agents=[Agent(agent_id="a")])
        second = EvaluationRequestDTO(user_address="u", content="c", agents=[Agent(agent_id="a")])

        assert first.request_id != second.request_id

    @pytest.mark.parametrize(
        "kwargs, field_name",
        [
            ({"user_address": ""}, "user_address"),
            ({"content": "  "}, "content"),
            ({"agents": []}, "agents"),
            ({"agents": [Agent(agent_id="a"), Agent(agent_id="a")]}, "agents"),
            ({"request_id": ""}, "request_id"),
            ({"config": EvaluationConfigDTO(round_timeout_ms=1)}, "round_timeout_ms"),
        ],
    )
    def test_validate_rejects_malformed(self, kwargs, field_name):
        values = {"user_address": "0.0.1001", "content": "text", "agents": [Agent(agent_id="a")]}
        values.update(kwargs)
        request = EvaluationRequestDTO(**values)

        with pytest.raises(ValidationError) as exc_info:
            request.validate()

        assert exc_info.value.field_name == field_name


class TestOrchestratorOutputDTO:
    """Test cases for OrchestratorOutputDTO."""

    def _failed_output(self):
        progress = EvaluationProgress(
            total_agents=2, total_rounds=1, status=EvaluationStatus.FAILED
        )
        return OrchestratorOutputDTO(
            request_id="request-1",
            status=EvaluationStatus.FAILED,
            progress=progress,
            transcript=EvaluationTranscript(),
            failure=EvaluationFailureDTO(
                reason=FailureReason.NO_SCORES_RECEIVED, message="No agent responded"
            ),
        )

    def test_failed_output(self):
        output = self._failed_output()

        assert not output.is_successful
        assert not output.needs_reconciliation
        assert output.billed_amount == Decimal("0")

    def test_raise_for_failure(self):
        output = self._failed_output()

        with pytest.raises(EvaluationFailedError) as exc_info:
            output.raise_for_failure()

        assert exc_info.value.reason == FailureReason.NO_SCORES_RECEIVED
        assert "NoScoresReceived" in exc_info.value.message

    def test_to_dict(self):
        data = self._failed_output().to_dict()

        assert data["status"] == "failed"
        assert data["failure"] == {
            "reason": "NoScoresReceived",
            "message": "No agent responded",
        }
        assert data["consensus"] is None
        assert data["billed_amount"] == "0"
        assert data["transcript"] == {"rounds": []}
