"""Domain-model mapper for Quota domain."""

from decimal import Decimal

from .....domain.quota.entities.user_quota import UserQuota
from .....domain.quota.value_objects.usage_record import UsageRecord
from ...models.quota_models import UsageLogModel, UserQuotaModel


class QuotaMapper:
    """Mapper between Quota domain objects and database models."""

    def quota_to_model(self, quota: UserQuota) -> UserQuotaModel:
        """Convert UserQuota domain entity to database model."""
        return UserQuotaModel(
            user_address=quota.user_address,
            monthly_cap=quota.monthly_cap,
            current_usage=quota.current_usage,
            last_reset_date=quota.last_reset_date,
            is_active=quota.is_active,
        )

    def model_to_quota(self, model: UserQuotaModel) -> UserQuota:
        """Convert database model to UserQuota domain entity."""
        return UserQuota(
            user_address=model.user_address,
            monthly_cap=Decimal(str(model.monthly_cap)),
            current_usage=Decimal(str(model.current_usage)),
            last_reset_date=model.last_reset_date,
            is_active=bool(model.is_active),
        )

    def usage_record_to_model(self, record: UsageRecord) -> UsageLogModel:
        """Convert UsageRecord value object to database model."""
        return UsageLogModel(
            user_address=record.user_address,
            amount=record.amount,
            currency=record.currency,
            task_id=record.task_id,
            tx_hash=record.tx_hash,
            description=record.description,
            timestamp=record.timestamp,
        )

    def model_to_usage_record(self, model: UsageLogModel) -> UsageRecord:
        """Convert database model to UsageRecord value object."""
        return UsageRecord(
            user_address=model.user_address,
            amount=Decimal(str(model.amount)),
            task_id=model.task_id,
            tx_hash=model.tx_hash,
            currency=model.currency,
            description=model.description,
            timestamp=model.timestamp,
        )
