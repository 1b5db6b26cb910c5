"""Consensus tuning settings."""

import os
from dataclasses import dataclass

from ...constants import (
    DEFAULT_MAJORITY_THRESHOLD,
    DEFAULT_OUTLIER_Z_THRESHOLD,
    DEFAULT_TRIM_PERCENT,
    MAX_SCORE,
    MIN_SCORE,
)
from ..exceptions import ValidationError


@dataclass(frozen=True)
class ConsensusSettings:
    """Parameters of the consensus algorithms."""

    trim_percent: float = DEFAULT_TRIM_PERCENT
    outlier_z_threshold: float = DEFAULT_OUTLIER_Z_THRESHOLD
    majority_threshold: float = DEFAULT_MAJORITY_THRESHOLD

    def __post_init__(self):
        """Validate settings."""
        if not (0 <= self.trim_percent < 0.5):
            raise ValidationError("trim_percent must be in [0, 0.5)")

        if self.outlier_z_threshold <= 0:
            raise ValidationError("outlier_z_threshold must be positive")

        if not (MIN_SCORE <= self.majority_threshold <= MAX_SCORE):
            raise ValidationError(
                f"majority_threshold must be between {MIN_SCORE} and {MAX_SCORE}"
            )

    @classmethod
    def from_env(cls) -> "ConsensusSettings":
        """Create settings from environment variables."""
        return cls(
            trim_percent=float(os.getenv("JURYBOX_TRIM_PERCENT", str(DEFAULT_TRIM_PERCENT))),
            outlier_z_threshold=float(
                os.getenv("JURYBOX_OUTLIER_Z_THRESHOLD", str(DEFAULT_OUTLIER_Z_THRESHOLD))
            ),
            majority_threshold=float(
                os.getenv("JURYBOX_MAJORITY_THRESHOLD", str(DEFAULT_MAJORITY_THRESHOLD))
            ),
        )
