"""Repository interface for quota domain."""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from ..entities.user_quota import UserQuota
from ..value_objects.usage_record import UsageRecord


class QuotaRepository(ABC):
    """Durable store of user quotas and usage records, keyed by user address."""

    @abstractmethod
    async def get_quota(self, user_address: str) -> Optional[UserQuota]:
        """Get quota by user address."""
        pass

    @abstractmethod
    async def save_quota(self, quota: UserQuota) -> None:
        """Insert or update quota."""
        pass

    @abstractmethod
    async def increment_usage(
        self, user_address: str, amount: Decimal, default_cap: Decimal, now: datetime
    ) -> UserQuota:
        """Atomically add ``amount`` to current usage.

        Creates the quota with ``default_cap`` when the user has none.
        """
        pass

    @abstractmethod
    async def add_usage_record(self, record: UsageRecord) -> None:
        """Append a usage record."""
        pass

    @abstractmethod
    async def get_usage_records(self, user_address: str, limit: int = 50) -> List[UsageRecord]:
        """Get usage records, newest first."""
        pass

    @abstractmethod
    async def get_usage_records_since(
        self, user_address: str, since: datetime
    ) -> List[UsageRecord]:
        """Get usage records at or after ``since``, oldest first."""
        pass
