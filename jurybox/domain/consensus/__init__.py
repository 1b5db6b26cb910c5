"""Consensus domain: statistics, algorithms and engine."""
