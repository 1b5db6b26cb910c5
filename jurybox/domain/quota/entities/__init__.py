"""Entities for quota domain."""

from .user_quota import UserQuota, start_of_month, start_of_next_month

__all__ = [
    "UserQuota",
    "start_of_month",
    "start_of_next_month",
]
