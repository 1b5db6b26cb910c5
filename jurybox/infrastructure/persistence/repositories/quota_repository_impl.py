"""Quota repository implementation."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, update

from ....domain.quota.entities.user_quota import UserQuota
from ....domain.quota.repositories.quota_repository import QuotaRepository
from ....domain.quota.value_objects.usage_record import UsageRecord
from ..database import SessionFactory
from ..models.quota_models import UsageLogModel, UserQuotaModel
from .mappers.quota_mapper import QuotaMapper


class SqlAlchemyQuotaRepository(QuotaRepository):
    """SQLAlchemy implementation of QuotaRepository."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory
        self.mapper = QuotaMapper()

    async def get_quota(self, user_address: str) -> Optional[UserQuota]:
        """Get quota by user address."""
        async with self.session_factory() as session:
            try:
                query = select(UserQuotaModel).where(UserQuotaModel.user_address == user_address)
                result = await session.execute(query)
                quota_model = result.scalar_one_or_none()

                if quota_model is None:
                    return None

                return self.mapper.model_to_quota(quota_model)

            except Exception:
                await session.rollback()
                raise

    async def save_quota(self, quota: UserQuota) -> None:
        """Insert or update quota."""
        async with self.session_factory() as session:
            try:
                # Use merge for upsert behavior
                await session.merge(self.mapper.quota_to_model(quota))
                await session.commit()

            except Exception:
                await session.rollback()
                raise

    async def increment_usage(
        self, user_address: str, amount: Decimal, default_cap: Decimal, now: datetime
    ) -> UserQuota:
        """Atomically add ``amount`` to current usage in a single UPDATE."""
        async with self.session_factory() as session:
            try:
                query = (
                    update(UserQuotaModel)
                    .where(UserQuotaModel.user_address == user_address)
                    .values(
                        current_usage=UserQuotaModel.current_usage + amount,
                        updated_at=now,
                    )
                )
                result = await session.execute(query)

                if result.rowcount == 0:
                    session.add(
                        UserQuotaModel(
                            user_address=user_address,
                            monthly_cap=default_cap,
                            current_usage=amount,
                            last_reset_date=now,
                            is_active=True,
                        )
                    )

                await session.commit()

                refreshed = await session.execute(
                    select(UserQuotaModel).where(UserQuotaModel.user_address == user_address)
                )
                return self.mapper.model_to_quota(refreshed.scalar_one())

            except Exception:
                await session.rollback()
                raise

    async def add_usage_record(self, record: UsageRecord) -> None:
        """Append a usage record."""
        async with self.session_factory() as session:
            try:
                session.add(self.mapper.usage_record_to_model(record))
                await session.commit()

            except Exception:
                await session.rollback()
                raise

    async def get_usage_records(self, user_address: str, limit: int = 50) -> List[UsageRecord]:
        """Get usage records, newest first."""
        async with self.session_factory() as session:
            try:
                query = (
                    select(UsageLogModel)
                    .where(UsageLogModel.user_address == user_address)
                    .order_by(UsageLogModel.timestamp.desc(), UsageLogModel.id.desc())
                    .limit(limit)
                )
                result = await session.execute(query)

                return [
                    self.mapper.model_to_usage_record(model) for model in result.scalars().all()
                ]

            except Exception:
                await session.rollback()
                raise

    async def get_usage_records_since(
        self, user_address: str, since: datetime
    ) -> List[UsageRecord]:
        """Get usage records at or after ``since``, oldest first."""
        async with self.session_factory() as session:
            try:
                query = (
                    select(UsageLogModel)
                    .where(
                        UsageLogModel.user_address == user_address,
                        UsageLogModel.timestamp >= since,
                    )
                    .order_by(UsageLogModel.timestamp.asc(), UsageLogModel.id.asc())
                )
                result = await session.execute(query)

                return [
                    self.mapper.model_to_usage_record(model) for model in result.scalars().all()
                ]

            except Exception:
                await session.rollback()
                raise
