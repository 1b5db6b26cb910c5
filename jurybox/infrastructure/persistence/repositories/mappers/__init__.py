"""Domain-model mappers."""

from .quota_mapper import QuotaMapper

__all__ = ["QuotaMapper"]
