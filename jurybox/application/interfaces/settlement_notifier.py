"""Settlement notifier interface."""

from abc import ABC, abstractmethod
from decimal import Decimal


class SettlementNotifier(ABC):
    """Interface for telling the billing side about a confirmed spend."""

    @abstractmethod
    async def notify_settlement(
        self, request_id: str, user_address: str, amount: Decimal
    ) -> None:
        """Notify that ``amount`` was recorded for a completed evaluation."""
        pass
