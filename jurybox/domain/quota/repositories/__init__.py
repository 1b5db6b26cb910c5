"""Repositories for quota domain."""

from .quota_repository import QuotaRepository

__all__ = ["QuotaRepository"]
