"""Monthly usage summary value object."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict


@dataclass(frozen=True)
class UsageSummary:
    """Aggregate of a user's usage records for the current calendar month."""

    user_address: str
    period_start: datetime
    total_records: int
    total_amount: Decimal
    monthly_cap: Decimal

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "user_address": self.user_address,
            "period_start": self.period_start.isoformat(),
            "total_records": self.total_records,
            "total_amount": str(self.total_amount),
            "monthly_cap": str(self.monthly_cap),
        }
