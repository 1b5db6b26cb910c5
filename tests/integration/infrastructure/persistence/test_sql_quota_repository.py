"""Integration tests for the SQLAlchemy quota repository on SQLite."""

import asyncio
from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio

from jurybox.application.services.quota.quota_gate import QuotaGate
from jurybox.infrastructure.persistence.database import DatabaseConfig, DatabaseManager
from jurybox.infrastructure.persistence.repositories.quota_repository_impl import (
    SqlAlchemyQuotaRepository,
)
from tests.factories import UsageRecordFactory, UserQuotaFactory

USER = "0.0.1001"
NOW = datetime(2026, 3, 15, 12, 0, 0)


@pytest_asyncio.fixture
async def database(tmp_path):
    """Fresh SQLite database with the quota schema."""
    manager = DatabaseManager(
        DatabaseConfig(database_url=f"sqlite+aiosqlite:///{tmp_path / 'quota.db'}")
    )
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
def repository(database):
    return SqlAlchemyQuotaRepository(database.get_async_session_factory())


@pytest.mark.integration
class TestSqlAlchemyQuotaRepository:
    """Integration tests for SqlAlchemyQuotaRepository."""

    @pytest.mark.asyncio
    async def test_health_check(self, database):
        health = await database.health_check()

        assert health["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_missing_quota(self, repository):
        assert await repository.get_quota(USER) is None

    @pytest.mark.asyncio
    async def test_save_and_get_quota(self, repository):
        quota = UserQuotaFactory(
            user_address=USER,
            monthly_cap=Decimal("150.5"),
            current_usage=Decimal("12.25"),
            last_reset_date=datetime(2026, 3, 1),
        )

        await repository.save_quota(quota)
        stored = await repository.get_quota(USER)

        assert stored.monthly_cap == Decimal("150.5")
        assert stored.current_usage == Decimal("12.25")
        assert stored.last_reset_date == datetime(2026, 3, 1)
        assert stored.is_active

    @pytest.mark.asyncio
    async def test_save_updates_existing_quota(self, repository):
        quota = UserQuotaFactory(user_address=USER)
        await repository.save_quota(quota)

        quota.monthly_cap = Decimal("400")
        quota.is_active = False
        await repository.save_quota(quota)
        stored = await repository.get_quota(USER)

        assert stored.monthly_cap == Decimal("400")
        assert not stored.is_active

    @pytest.mark.asyncio
    async def test_increment_usage(self, repository):
        await repository.save_quota(
            UserQuotaFactory(user_address=USER, current_usage=Decimal("10"))
        )

        quota = await repository.increment_usage(USER, Decimal("2.5"), Decimal("100"), NOW)

        assert quota.current_usage == Decimal("12.5")
        assert (await repository.get_quota(USER)).current_usage == Decimal("12.5")

    @pytest.mark.asyncio
    async def test_increment_usage_creates_missing_quota(self, repository):
        quota = await repository.increment_usage(USER, Decimal("3"), Decimal("75"), NOW)

        assert quota.current_usage == Decimal("3")
        assert quota.monthly_cap == Decimal("75")
        assert quota.last_reset_date == NOW

    @pytest.mark.asyncio
    async def test_usage_records_ordering(self, repository):
        for day in (2, 9, 5):
            await repository.add_usage_record(
                UsageRecordFactory(
                    user_address=USER,
                    amount=Decimal(day),
                    timestamp=datetime(2026, 3, day),
                    tx_hash=f"0xabc{day}",
                )
            )
        await repository.add_usage_record(
            UsageRecordFactory(user_address="0.0.9999", timestamp=datetime(2026, 3, 20))
        )

        newest_first = await repository.get_usage_records(USER)
        limited = await repository.get_usage_records(USER, limit=1)
        since = await repository.get_usage_records_since(USER, datetime(2026, 3, 5))

        assert [record.timestamp.day for record in newest_first] == [9, 5, 2]
        assert newest_first[0].amount == Decimal("9")
        assert newest_first[0].tx_hash == "0xabc9"
        assert [record.timestamp.day for record in limited] == [9]
        assert [record.timestamp.day for record in since] == [5, 9]


@pytest.mark.integration
class TestQuotaGateWithDatabase:
    """QuotaGate over the SQL store."""

    @pytest.mark.asyncio
    async def test_concurrent_usage_recording(self, repository):
        gate = QuotaGate(repository, clock=lambda: NOW)

        await asyncio.gather(
            gate.record_usage(UsageRecordFactory(user_address=USER, amount=Decimal("60"))),
            gate.record_usage(UsageRecordFactory(user_address=USER, amount=Decimal("60"))),
        )

        status = await gate.get_quota_status(USER)
        assert status.current_usage == Decimal("120")
        assert not status.allowed
        assert len(await gate.get_usage_history(USER)) == 2

    @pytest.mark.asyncio
    async def test_monthly_reset_persists(self, repository):
        await repository.save_quota(
            UserQuotaFactory(
                user_address=USER,
                current_usage=Decimal("90"),
                last_reset_date=datetime(2026, 2, 10),
            )
        )
        gate = QuotaGate(repository, clock=lambda: NOW)

        result = await gate.check_quota(USER, Decimal("50"))
        stored = await repository.get_quota(USER)

        assert result.allowed
        assert stored.current_usage == Decimal("0")
        assert stored.last_reset_date == NOW
