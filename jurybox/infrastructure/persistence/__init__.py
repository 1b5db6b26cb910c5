"""Persistence layer for quotas and usage records."""
