"""Tests for quota domain entities and value objects."""

from datetime import datetime
from decimal import Decimal

import pytest

from jurybox.domain.quota.entities.user_quota import (
    UserQuota,
    start_of_month,
    start_of_next_month,
)
from jurybox.domain.quota.exceptions import QuotaValidationError
from jurybox.domain.quota.value_objects.quota_settings import QuotaSettings
from jurybox.domain.quota.value_objects.usage_record import UsageRecord
from tests.factories import UserQuotaFactory


class TestMonthBoundaries:
    """Test cases for calendar month helpers."""

    def test_start_of_month(self):
        assert start_of_month(datetime(2026, 3, 15, 12, 30)) == datetime(2026, 3, 1)

    def test_start_of_next_month(self):
        assert start_of_next_month(datetime(2026, 3, 31, 23, 59)) == datetime(2026, 4, 1)

    def test_start_of_next_month_across_year(self):
        assert start_of_next_month(datetime(2026, 12, 5)) == datetime(2027, 1, 1)


class TestUserQuota:
    """Test cases for UserQuota entity."""

    def test_create_default(self):
        now = datetime(2026, 3, 15)

        quota = UserQuota.create_default("0.0.1001", now)

        assert quota.monthly_cap == Decimal("100.0")
        assert quota.current_usage == Decimal("0")
        assert quota.last_reset_date == now
        assert quota.is_active

    def test_values_coerced_to_decimal(self):
        quota = UserQuota(
            "0.0.1001", monthly_cap=50, current_usage=2.5, last_reset_date=datetime(2026, 3, 1)
        )

        assert quota.monthly_cap == Decimal("50")
        assert quota.current_usage == Decimal("2.5")

    def test_negative_usage_rejected(self):
        with pytest.raises(QuotaValidationError):
            UserQuotaFactory(current_usage=Decimal("-1"))

    def test_negative_cap_rejected(self):
        with pytest.raises(QuotaValidationError):
            UserQuotaFactory(monthly_cap=Decimal("-5"))

    def test_needs_reset_only_on_new_calendar_month(self):
        quota = UserQuotaFactory(last_reset_date=datetime(2026, 3, 1))

        assert not quota.needs_reset(datetime(2026, 3, 31, 23, 59))
        assert quota.needs_reset(datetime(2026, 4, 1, 0, 0))

    def test_needs_reset_regardless_of_elapsed_days(self):
        quota = UserQuotaFactory(last_reset_date=datetime(2026, 3, 31, 23, 0))

        assert quota.needs_reset(datetime(2026, 4, 1, 1, 0))

    def test_needs_reset_across_year(self):
        quota = UserQuotaFactory(last_reset_date=datetime(2026, 12, 20))

        assert quota.needs_reset(datetime(2027, 1, 2))

    def test_reset(self):
        quota = UserQuotaFactory(current_usage=Decimal("40"))
        now = datetime(2026, 4, 2)

        quota.reset(now)

        assert quota.current_usage == Decimal("0")
        assert quota.last_reset_date == now
        assert quota.next_reset_date() == datetime(2026, 5, 1)

    def test_would_allow_includes_reservations(self):
        quota = UserQuotaFactory(monthly_cap=Decimal("100"), current_usage=Decimal("90"))

        assert quota.would_allow(Decimal("10"))
        assert not quota.would_allow(Decimal("20"))
        assert not quota.would_allow(Decimal("10"), reserved=Decimal("5"))

    def test_remaining_never_negative(self):
        quota = UserQuotaFactory(monthly_cap=Decimal("100"), current_usage=Decimal("120"))

        assert quota.remaining() == Decimal("0")


class TestUsageRecord:
    """Test cases for UsageRecord value object."""

    def test_amount_coerced(self):
        record = UsageRecord(user_address="0.0.1001", amount=3)

        assert record.amount == Decimal("3")
        assert record.currency == "USD"

    def test_negative_amount_rejected(self):
        with pytest.raises(QuotaValidationError):
            UsageRecord(user_address="0.0.1001", amount=Decimal("-0.01"))

    def test_empty_user_rejected(self):
        with pytest.raises(QuotaValidationError):
            UsageRecord(user_address="", amount=Decimal("1"))


class TestQuotaSettings:
    """Test cases for QuotaSettings."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("JURYBOX_DEFAULT_MONTHLY_CAP", "250.50")
        monkeypatch.setenv("JURYBOX_USAGE_HISTORY_LIMIT", "10")

        settings = QuotaSettings.from_env()

        assert settings.default_monthly_cap == Decimal("250.50")
        assert settings.usage_history_limit == 10
        assert settings.currency == "USD"
