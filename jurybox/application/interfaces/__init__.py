"""Interfaces of external collaborators."""

from .agent_scoring_provider import AgentScoringProvider
from .settlement_notifier import SettlementNotifier

__all__ = ["AgentScoringProvider", "SettlementNotifier"]
