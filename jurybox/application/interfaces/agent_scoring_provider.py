"""Agent scoring provider interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ...domain.consensus.entities.agent import Agent
from ...domain.evaluation.value_objects.agent_score import AgentScore
from ...domain.evaluation.value_objects.round_context import RoundContext


class AgentScoringProvider(ABC):
    """Interface for obtaining one agent's score for a piece of content."""

    @abstractmethod
    async def score(
        self,
        agent: Agent,
        content: str,
        criteria: List[str],
        context: Optional[RoundContext] = None,
    ) -> AgentScore:
        """Score ``content`` as ``agent``.

        ``context`` is None in the first round and carries the previous round's
        outcome in discussion rounds. Implementations may raise; the caller
        treats any error as the agent not participating in the round.
        """
        pass
