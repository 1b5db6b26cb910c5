"""User quota entity."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict

from ...constants import DEFAULT_MONTHLY_CAP
from ..exceptions import QuotaValidationError


def start_of_month(moment: datetime) -> datetime:
    """First instant of the calendar month containing ``moment``."""
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def start_of_next_month(moment: datetime) -> datetime:
    """First instant of the calendar month after the one containing ``moment``."""
    if moment.month == 12:
        return start_of_month(moment).replace(year=moment.year + 1, month=1)
    return start_of_month(moment).replace(month=moment.month + 1)


@dataclass
class UserQuota:
    """Monthly spending ledger of one requester.

    Usage is reset to zero once per calendar month boundary crossed since
    ``last_reset_date``; it is never reset on a rolling 30-day window.
    """

    user_address: str
    monthly_cap: Decimal
    current_usage: Decimal
    last_reset_date: datetime
    is_active: bool = True

    def __post_init__(self):
        """Validate quota after creation."""
        if not self.user_address or not self.user_address.strip():
            raise QuotaValidationError("User address cannot be empty")

        self.monthly_cap = Decimal(str(self.monthly_cap))
        self.current_usage = Decimal(str(self.current_usage))

        if self.monthly_cap < 0:
            raise QuotaValidationError("Monthly cap cannot be negative")

        if self.current_usage < 0:
            raise QuotaValidationError("Current usage cannot be negative")

    @classmethod
    def create_default(
        cls, user_address: str, now: datetime, monthly_cap: Decimal = DEFAULT_MONTHLY_CAP
    ) -> "UserQuota":
        """Factory method for a first-seen user."""
        return cls(
            user_address=user_address,
            monthly_cap=monthly_cap,
            current_usage=Decimal("0"),
            last_reset_date=now,
        )

    def needs_reset(self, now: datetime) -> bool:
        """Check if a calendar month boundary was crossed since the last reset."""
        return (now.year, now.month) > (self.last_reset_date.year, self.last_reset_date.month)

    def reset(self, now: datetime) -> None:
        """Start a new billing month."""
        self.current_usage = Decimal("0")
        self.last_reset_date = now

    def next_reset_date(self) -> datetime:
        """First instant of the month following the last reset."""
        return start_of_next_month(self.last_reset_date)

    def remaining(self, reserved: Decimal = Decimal("0")) -> Decimal:
        """Spend still available this month, never negative."""
        return max(Decimal("0"), self.monthly_cap - self.current_usage - reserved)

    def would_allow(self, amount: Decimal, reserved: Decimal = Decimal("0")) -> bool:
        """Check if ``amount`` fits under the cap alongside pending reservations."""
        return self.current_usage + reserved + amount <= self.monthly_cap

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "user_address": self.user_address,
            "monthly_cap": str(self.monthly_cap),
            "current_usage": str(self.current_usage),
            "last_reset_date": self.last_reset_date.isoformat(),
            "is_active": self.is_active,
        }
