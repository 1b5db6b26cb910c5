"""Tests for the consensus engine."""

import pytest

from jurybox.domain.consensus.entities.agent import Agent, AgentReputation
from jurybox.domain.consensus.exceptions import (
    MissingMetadataError,
    UnknownConsensusMethodError,
    ValidationError,
)
from jurybox.domain.consensus.services.consensus_engine import ConsensusEngine
from jurybox.domain.consensus.value_objects.consensus_method import ConsensusMethod
from jurybox.domain.consensus.value_objects.consensus_settings import ConsensusSettings


class TestConsensusEngine:
    """Test cases for ConsensusEngine dispatch."""

    def setup_method(self):
        self.engine = ConsensusEngine()
        self.scores = {"A": 8.0, "B": 6.0, "C": 7.0}
        self.agents = [
            Agent(agent_id, reputation=AgentReputation(average_rating=8.0, completed_judgments=3))
            for agent_id in self.scores
        ]

    def test_supported_methods(self):
        assert set(ConsensusEngine.supported_methods()) == {
            "simple_average",
            "weighted_average",
            "median",
            "trimmed_mean",
            "majority_voting",
            "iterative_convergence",
            "delphi_method",
        }

    @pytest.mark.parametrize("method", [None, "", "   "])
    def test_unspecified_method_uses_simple_average(self, method):
        result = self.engine.calculate(method, self.scores)

        assert result.algorithm_name == "simple_average"
        assert result.final_score == pytest.approx(7.0)

    def test_unknown_method_fails_closed(self):
        with pytest.raises(UnknownConsensusMethodError) as exc_info:
            self.engine.calculate("bayesian_magic", self.scores)

        assert exc_info.value.method == "bayesian_magic"
        assert isinstance(exc_info.value, ValidationError)

    def test_method_names_are_normalized(self):
        result = self.engine.calculate("Trimmed-Mean", self.scores)

        assert result.algorithm_name == "trimmed_mean"

    def test_accepts_enum_member(self):
        result = self.engine.calculate(ConsensusMethod.MEDIAN, self.scores)

        assert result.final_score == 7.0

    def test_iterative_convergence_aggregates_like_simple_average(self):
        result = self.engine.calculate("iterative_convergence", self.scores)

        assert result.algorithm_name == "iterative_convergence"
        assert result.final_score == pytest.approx(7.0)
        assert result.weights is None

    def test_delphi_method_aggregates_like_weighted_average(self):
        result = self.engine.calculate("delphi_method", self.scores, self.agents)

        assert result.algorithm_name == "delphi_method"
        assert result.final_score == pytest.approx(7.0)
        assert result.weights is not None

    @pytest.mark.parametrize("method", ["weighted_average", "delphi_method"])
    def test_weighted_methods_require_agents(self, method):
        with pytest.raises(MissingMetadataError):
            self.engine.calculate(method, self.scores)

    def test_trim_percent_from_settings(self):
        engine = ConsensusEngine(ConsensusSettings(trim_percent=0.25))
        scores = {"a": 0.0, "b": 5.0, "c": 6.0, "d": 10.0}

        result = engine.calculate("trimmed_mean", scores)

        assert result.final_score == pytest.approx(5.5)

    def test_trim_percent_override(self):
        scores = {"a": 0.0, "b": 5.0, "c": 6.0, "d": 10.0}

        result = self.engine.calculate("trimmed_mean", scores, trim_percent=0.25)

        assert result.final_score == pytest.approx(5.5)
        assert result.metadata["trim_percent"] == 0.25

    def test_majority_threshold_from_settings(self):
        engine = ConsensusEngine(ConsensusSettings(majority_threshold=7.5))

        result = engine.calculate("majority_voting", self.scores)

        assert result.final_score == 5.5
