"""Quota repository implementations."""

from .in_memory_quota_repository import InMemoryQuotaRepository
from .quota_repository_impl import SqlAlchemyQuotaRepository

__all__ = ["InMemoryQuotaRepository", "SqlAlchemyQuotaRepository"]
