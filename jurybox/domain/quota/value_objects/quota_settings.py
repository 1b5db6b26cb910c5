"""Quota gate settings."""

import os
from dataclasses import dataclass
from decimal import Decimal

from ...constants import DEFAULT_CURRENCY, DEFAULT_MONTHLY_CAP, DEFAULT_USAGE_HISTORY_LIMIT


@dataclass(frozen=True)
class QuotaSettings:
    """Defaults applied by the quota gate."""

    default_monthly_cap: Decimal = DEFAULT_MONTHLY_CAP
    currency: str = DEFAULT_CURRENCY
    usage_history_limit: int = DEFAULT_USAGE_HISTORY_LIMIT

    @classmethod
    def from_env(cls) -> "QuotaSettings":
        """Create settings from environment variables."""
        return cls(
            default_monthly_cap=Decimal(
                os.getenv("JURYBOX_DEFAULT_MONTHLY_CAP", str(DEFAULT_MONTHLY_CAP))
            ),
            currency=os.getenv("JURYBOX_CURRENCY", DEFAULT_CURRENCY),
            usage_history_limit=int(
                os.getenv("JURYBOX_USAGE_HISTORY_LIMIT", str(DEFAULT_USAGE_HISTORY_LIMIT))
            ),
        )
