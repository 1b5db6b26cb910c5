"""Quota reservation value object."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4


@dataclass(frozen=True)
class QuotaReservation:
    """Admitted spend held against the cap until it is recorded or released."""

    user_address: str
    amount: Decimal
    reservation_id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)
