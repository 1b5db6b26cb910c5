"""Usage record value object."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from ...constants import DEFAULT_CURRENCY
from ..exceptions import QuotaValidationError


@dataclass(frozen=True)
class UsageRecord:
    """Append-only audit entry for a confirmed spend."""

    user_address: str
    amount: Decimal
    task_id: Optional[str] = None
    tx_hash: Optional[str] = None
    currency: str = DEFAULT_CURRENCY
    description: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        """Validate usage record."""
        if not self.user_address or not self.user_address.strip():
            raise QuotaValidationError("User address cannot be empty")

        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))

        if self.amount < 0:
            raise QuotaValidationError("Usage amount cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "user_address": self.user_address,
            "amount": str(self.amount),
            "task_id": self.task_id,
            "tx_hash": self.tx_hash,
            "currency": self.currency,
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
        }
