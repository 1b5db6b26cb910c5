"""Database models."""

from .quota_models import UsageLogModel, UserQuotaModel

__all__ = ["UsageLogModel", "UserQuotaModel"]
