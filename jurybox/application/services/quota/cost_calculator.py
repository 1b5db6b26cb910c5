"""Evaluation cost estimation and billing."""

from decimal import Decimal
from typing import Iterable, List

from ....domain.consensus.entities.agent import Agent


def estimate_evaluation_cost(agents: List[Agent]) -> Decimal:
    """Spend to admit before an evaluation starts.

    Every selected agent is paid once per evaluation regardless of how many
    discussion rounds it takes part in.
    """
    return sum((agent.fee_per_judgment for agent in agents), Decimal("0"))


def calculate_billed_amount(agents: List[Agent], participating_ids: Iterable[str]) -> Decimal:
    """Spend to record for a completed evaluation: fees of agents that scored."""
    participating = set(participating_ids)
    return sum(
        (agent.fee_per_judgment for agent in agents if agent.agent_id in participating),
        Decimal("0"),
    )
