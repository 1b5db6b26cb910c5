"""Entities for consensus domain."""

from .agent import Agent, AgentReputation

__all__ = [
    "Agent",
    "AgentReputation",
]
