"""Global test configuration and fixtures."""

import logging
from datetime import datetime

import pytest

from jurybox.infrastructure.persistence.repositories.in_memory_quota_repository import (
    InMemoryQuotaRepository,
)

# Configure logging for tests
logging.basicConfig(level=logging.INFO)


class MutableClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> MutableClock:
    """Clock fixed mid-month, away from any boundary."""
    return MutableClock(datetime(2026, 3, 15, 12, 0, 0))


@pytest.fixture
def quota_repository() -> InMemoryQuotaRepository:
    """Fresh in-memory quota store."""
    return InMemoryQuotaRepository()
