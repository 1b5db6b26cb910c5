"""In-memory quota repository for tests and single-process use."""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from ....domain.quota.entities.user_quota import UserQuota
from ....domain.quota.repositories.quota_repository import QuotaRepository
from ....domain.quota.value_objects.usage_record import UsageRecord


class InMemoryQuotaRepository(QuotaRepository):
    """QuotaRepository kept in process memory.

    Callers get copies; changes only persist through ``save_quota``.
    """

    def __init__(self):
        self._quotas: Dict[str, UserQuota] = {}
        self._records: List[UsageRecord] = []

    async def get_quota(self, user_address: str) -> Optional[UserQuota]:
        quota = self._quotas.get(user_address)
        return replace(quota) if quota else None

    async def save_quota(self, quota: UserQuota) -> None:
        self._quotas[quota.user_address] = replace(quota)

    async def increment_usage(
        self, user_address: str, amount: Decimal, default_cap: Decimal, now: datetime
    ) -> UserQuota:
        quota = self._quotas.get(user_address)
        if quota is None:
            quota = UserQuota.create_default(user_address, now, monthly_cap=default_cap)
            self._quotas[user_address] = quota

        quota.current_usage += amount
        return replace(quota)

    async def add_usage_record(self, record: UsageRecord) -> None:
        self._records.append(record)

    async def get_usage_records(self, user_address: str, limit: int = 50) -> List[UsageRecord]:
        records = [record for record in self._records if record.user_address == user_address]
        records.reverse()
        records.sort(key=lambda record: record.timestamp, reverse=True)
        return records[:limit]

    async def get_usage_records_since(
        self, user_address: str, since: datetime
    ) -> List[UsageRecord]:
        records = [
            record
            for record in self._records
            if record.user_address == user_address and record.timestamp >= since
        ]
        records.sort(key=lambda record: record.timestamp)
        return records
