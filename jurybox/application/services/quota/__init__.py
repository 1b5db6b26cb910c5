"""Quota application services."""

from .cost_calculator import calculate_billed_amount, estimate_evaluation_cost
from .quota_gate import QuotaGate

__all__ = ["QuotaGate", "calculate_billed_amount", "estimate_evaluation_cost"]
