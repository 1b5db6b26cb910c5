"""Quota check result value object."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class QuotaCheckResult:
    """Admission decision for a requested spend."""

    allowed: bool
    current_usage: Decimal
    monthly_cap: Decimal
    remaining_quota: Decimal
    reset_date: datetime
    reason: Optional[str] = None
    reserved_amount: Decimal = Decimal("0")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "allowed": self.allowed,
            "current_usage": str(self.current_usage),
            "monthly_cap": str(self.monthly_cap),
            "remaining_quota": str(self.remaining_quota),
            "reset_date": self.reset_date.isoformat(),
            "reason": self.reason,
            "reserved_amount": str(self.reserved_amount),
        }
