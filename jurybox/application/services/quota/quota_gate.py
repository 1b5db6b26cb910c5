"""Monthly spending quota gate."""

import asyncio
import logging
import weakref
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Union
from uuid import UUID

from ....domain.quota.entities.user_quota import UserQuota, start_of_month, start_of_next_month
from ....domain.quota.exceptions import QuotaExceededError, QuotaValidationError
from ....domain.quota.repositories.quota_repository import QuotaRepository
from ....domain.quota.value_objects.quota_check_result import QuotaCheckResult
from ....domain.quota.value_objects.quota_reservation import QuotaReservation
from ....domain.quota.value_objects.quota_settings import QuotaSettings
from ....domain.quota.value_objects.usage_record import UsageRecord
from ....domain.quota.value_objects.usage_summary import UsageSummary

logger = logging.getLogger(__name__)

Amount = Union[Decimal, int, float, str]


def _to_amount(amount: Amount) -> Decimal:
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    if value < 0:
        raise QuotaValidationError(f"Amount cannot be negative, got {value}")
    return value


def _require_user(user_address: str) -> None:
    if not user_address or not user_address.strip():
        raise QuotaValidationError("User address cannot be empty")


class QuotaGate:
    """Per-user monthly usage ledger guarding evaluation spend.

    Every read-modify-write of a user's quota runs under that user's
    ``asyncio.Lock``, so a check, the calendar-month reset and the usage
    increment can never interleave for the same user within a process.
    Admitted spend is held as a reservation until it is recorded or released,
    which keeps concurrent admissions from jointly overshooting the cap.
    """

    def __init__(
        self,
        repository: QuotaRepository,
        settings: Optional[QuotaSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.settings = settings or QuotaSettings()
        self._clock = clock or datetime.utcnow
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )
        self._reservations: Dict[str, Dict[UUID, QuotaReservation]] = {}

    def _lock_for(self, user_address: str) -> asyncio.Lock:
        lock = self._locks.get(user_address)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_address] = lock
        return lock

    def _reserved_amount(self, user_address: str) -> Decimal:
        holds = self._reservations.get(user_address, {})
        return sum((hold.amount for hold in holds.values()), Decimal("0"))

    async def _load_quota(self, user_address: str, now: datetime) -> UserQuota:
        """Fetch or lazily create the quota, applying a due monthly reset."""
        quota = await self.repository.get_quota(user_address)

        if quota is None:
            quota = UserQuota.create_default(
                user_address, now, monthly_cap=self.settings.default_monthly_cap
            )
            await self.repository.save_quota(quota)
            logger.info(
                f"Created quota for {user_address} with monthly cap {quota.monthly_cap}"
            )
        elif quota.needs_reset(now):
            previous_usage = quota.current_usage
            quota.reset(now)
            await self.repository.save_quota(quota)
            logger.info(
                f"Monthly reset for {user_address}: usage {previous_usage} -> 0"
            )

        return quota

    def _evaluate(self, quota: UserQuota, amount: Decimal) -> QuotaCheckResult:
        reserved = self._reserved_amount(quota.user_address)
        allowed = quota.is_active and quota.would_allow(amount, reserved)
        remaining = quota.remaining(reserved)

        reason = None
        if not quota.is_active:
            reason = f"Quota for {quota.user_address} is inactive"
        elif not allowed:
            reason = (
                f"Requested {amount} exceeds remaining quota {remaining} "
                f"(usage {quota.current_usage}, reserved {reserved}, cap {quota.monthly_cap})"
            )

        return QuotaCheckResult(
            allowed=allowed,
            current_usage=quota.current_usage,
            monthly_cap=quota.monthly_cap,
            remaining_quota=remaining,
            reset_date=quota.next_reset_date(),
            reason=reason,
            reserved_amount=reserved,
        )

    async def check_quota(self, user_address: str, amount: Amount) -> QuotaCheckResult:
        """Check whether ``amount`` fits under the user's monthly cap."""
        _require_user(user_address)
        requested = _to_amount(amount)

        async with self._lock_for(user_address):
            quota = await self._load_quota(user_address, self._clock())
            result = self._evaluate(quota, requested)

        if not result.allowed:
            logger.info(f"Quota check denied for {user_address}: {result.reason}")
        return result

    async def admit(self, user_address: str, amount: Amount) -> QuotaReservation:
        """Check ``amount`` and hold it against the cap.

        Raises:
            QuotaExceededError: If the spend does not fit.
        """
        _require_user(user_address)
        requested = _to_amount(amount)

        async with self._lock_for(user_address):
            quota = await self._load_quota(user_address, self._clock())
            result = self._evaluate(quota, requested)

            if not result.allowed:
                logger.info(f"Admission denied for {user_address}: {result.reason}")
                raise QuotaExceededError(result.reason or "Quota exceeded", result)

            reservation = QuotaReservation(user_address=user_address, amount=requested)
            self._reservations.setdefault(user_address, {})[
                reservation.reservation_id
            ] = reservation

        logger.debug(f"Reserved {requested} for {user_address} ({reservation.reservation_id})")
        return reservation

    def release(self, reservation: QuotaReservation) -> bool:
        """Drop a hold. Returns False if it was already recorded or released."""
        holds = self._reservations.get(reservation.user_address)
        if not holds or holds.pop(reservation.reservation_id, None) is None:
            return False

        if not holds:
            del self._reservations[reservation.user_address]
        logger.debug(
            f"Released reservation {reservation.reservation_id} for {reservation.user_address}"
        )
        return True

    async def record_usage(
        self, record: UsageRecord, reservation: Optional[QuotaReservation] = None
    ) -> UserQuota:
        """Append a usage record and add its amount to the user's usage.

        Recording is unconditional bookkeeping: usage may end above the cap.
        The matching reservation, if any, is released.
        """
        user_address = record.user_address

        async with self._lock_for(user_address):
            now = self._clock()
            await self._load_quota(user_address, now)
            await self.repository.add_usage_record(record)
            quota = await self.repository.increment_usage(
                user_address, record.amount, self.settings.default_monthly_cap, now
            )
            if reservation is not None:
                self.release(reservation)

        logger.info(
            f"Recorded usage {record.amount} for {user_address} "
            f"(task {record.task_id}); usage now {quota.current_usage} of {quota.monthly_cap}"
        )
        return quota

    async def get_quota_status(self, user_address: str) -> QuotaCheckResult:
        """Current standing of a user without requesting any spend.

        Unknown users get a default status; no quota row is created.
        """
        _require_user(user_address)

        async with self._lock_for(user_address):
            now = self._clock()
            quota = await self.repository.get_quota(user_address)

            if quota is None:
                cap = self.settings.default_monthly_cap
                return QuotaCheckResult(
                    allowed=cap > 0,
                    current_usage=Decimal("0"),
                    monthly_cap=cap,
                    remaining_quota=cap,
                    reset_date=start_of_next_month(now),
                )

            if quota.needs_reset(now):
                quota.reset(now)
                await self.repository.save_quota(quota)
                logger.info(f"Monthly reset for {user_address} on status read")

            reserved = self._reserved_amount(user_address)
            return QuotaCheckResult(
                allowed=quota.is_active and quota.current_usage < quota.monthly_cap,
                current_usage=quota.current_usage,
                monthly_cap=quota.monthly_cap,
                remaining_quota=quota.remaining(reserved),
                reset_date=quota.next_reset_date(),
                reserved_amount=reserved,
            )

    async def update_monthly_cap(self, user_address: str, new_cap: Amount) -> UserQuota:
        """Set a user's monthly cap. Usage is left untouched."""
        _require_user(user_address)
        cap = _to_amount(new_cap)

        async with self._lock_for(user_address):
            quota = await self.repository.get_quota(user_address)
            if quota is None:
                quota = UserQuota.create_default(user_address, self._clock(), monthly_cap=cap)
            else:
                quota.monthly_cap = cap
            await self.repository.save_quota(quota)

        logger.info(f"Monthly cap for {user_address} set to {cap}")
        return quota

    async def get_usage_history(
        self, user_address: str, limit: Optional[int] = None
    ) -> List[UsageRecord]:
        """Usage records of a user, newest first."""
        _require_user(user_address)
        return await self.repository.get_usage_records(
            user_address, limit or self.settings.usage_history_limit
        )

    async def get_monthly_usage_summary(self, user_address: str) -> UsageSummary:
        """Count and total of the user's usage records this calendar month."""
        _require_user(user_address)
        period_start = start_of_month(self._clock())

        records = await self.repository.get_usage_records_since(user_address, period_start)
        quota = await self.repository.get_quota(user_address)

        return UsageSummary(
            user_address=user_address,
            period_start=period_start,
            total_records=len(records),
            total_amount=sum((record.amount for record in records), Decimal("0")),
            monthly_cap=quota.monthly_cap if quota else self.settings.default_monthly_cap,
        )
