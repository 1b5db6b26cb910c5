"""Quota domain: monthly spending caps and usage ledger."""
