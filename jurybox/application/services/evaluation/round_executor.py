"""Concurrent fan-out of one scoring round to all agents."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from ....domain.consensus.entities.agent import Agent
from ....domain.evaluation.value_objects.agent_score import AgentScore
from ....domain.evaluation.value_objects.round_context import RoundContext
from ...interfaces.agent_scoring_provider import AgentScoringProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundOutcome:
    """Responses collected in one round.

    Agents that timed out, errored or returned an invalid score are listed in
    ``non_participating``; they are never given a substitute score.
    """

    round_number: int
    responses: Dict[str, AgentScore]
    non_participating: List[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def scores(self) -> Dict[str, float]:
        return {agent_id: float(result.score) for agent_id, result in self.responses.items()}

    def has_responses(self) -> bool:
        return len(self.responses) > 0


class RoundExecutor:
    """Service for requesting scores from all agents of a round in parallel."""

    def __init__(self, scoring_provider: AgentScoringProvider):
        self.scoring_provider = scoring_provider

    async def execute_round(
        self,
        round_number: int,
        agents: List[Agent],
        content: str,
        criteria: List[str],
        timeout_seconds: float,
        contexts: Optional[Mapping[str, RoundContext]] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> RoundOutcome:
        """Score ``content`` with every agent concurrently.

        Returns when all agents answered, the deadline passed or
        ``cancel_event`` was set, whichever comes first. Calls still
        outstanding at that point are cancelled.
        """
        contexts = contexts or {}
        tasks: Dict[asyncio.Task, Agent] = {
            asyncio.create_task(
                self._score_agent(agent, content, criteria, contexts.get(agent.agent_id))
            ): agent
            for agent in agents
        }
        cancel_waiter = asyncio.create_task(cancel_event.wait()) if cancel_event else None

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_seconds
        pending = set(tasks)
        cancelled = False

        logger.debug(f"Round {round_number}: requesting scores from {len(agents)} agents")

        try:
            while pending:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break

                waiting = (pending | {cancel_waiter}) if cancel_waiter else pending
                done, _ = await asyncio.wait(
                    waiting, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
                )
                if not done:
                    break

                pending -= done
                if cancel_waiter is not None and cancel_waiter in done:
                    cancelled = True
                    break
        finally:
            leftovers = list(pending)
            if cancel_waiter is not None:
                leftovers.append(cancel_waiter)
            for task in leftovers:
                task.cancel()
            await asyncio.gather(*leftovers, return_exceptions=True)

        responses: Dict[str, AgentScore] = {}
        non_participating: List[str] = []
        for task, agent in tasks.items():
            result = task.result() if task.done() and not task.cancelled() else None
            if result is None:
                non_participating.append(agent.agent_id)
            else:
                responses[agent.agent_id] = result

        timed_out = [tasks[task].agent_id for task in pending]
        if timed_out and not cancelled:
            logger.warning(
                f"Round {round_number}: {len(timed_out)} agent(s) did not respond within "
                f"{timeout_seconds}s: {', '.join(timed_out)}"
            )

        logger.info(
            f"Round {round_number} collected {len(responses)}/{len(agents)} scores"
            + (" before cancellation" if cancelled else "")
        )

        return RoundOutcome(
            round_number=round_number,
            responses=responses,
            non_participating=non_participating,
            cancelled=cancelled,
        )

    async def _score_agent(
        self,
        agent: Agent,
        content: str,
        criteria: List[str],
        context: Optional[RoundContext],
    ) -> Optional[AgentScore]:
        """Score with one agent; errors drop the agent from the round."""
        try:
            result = await self.scoring_provider.score(agent, content, criteria, context)
            if not isinstance(result, AgentScore):
                raise TypeError(f"Expected AgentScore, got {type(result).__name__}")
            return result

        except Exception as e:
            logger.warning(f"Agent {agent.agent_id} failed to score: {str(e)}")
            return None
