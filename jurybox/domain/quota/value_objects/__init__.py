"""Value objects for quota domain."""

from .quota_check_result import QuotaCheckResult
from .quota_reservation import QuotaReservation
from .quota_settings import QuotaSettings
from .usage_record import UsageRecord
from .usage_summary import UsageSummary

__all__ = [
    "QuotaCheckResult",
    "QuotaReservation",
    "QuotaSettings",
    "UsageRecord",
    "UsageSummary",
]
