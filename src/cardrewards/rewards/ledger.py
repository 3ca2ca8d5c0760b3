"""Bonus points ledger.

Append-only record of how many bonus points each transaction consumed. The
sum of movements for an instrument inside a statement period is what counts
against that period's monthly cap.

Reading the remaining cap and writing the new movement must not interleave
for the same (instrument, period): `BonusPointsLedger` serializes them with a
per-key asyncio.Lock. The locks live in a `KeyedLocks` owned by the caller so
that every calculator sharing a store also shares its locks.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Hashable, Protocol
from uuid import UUID

from cardrewards.core.exceptions import LedgerError
from cardrewards.rewards.period import utc_date
from cardrewards.schemas.rewards import LedgerEntry, StatementPeriod

logger = logging.getLogger(__name__)


class LedgerStore(Protocol):
    """Persistence behind the ledger."""

    async def sum(
        self,
        instrument_id: UUID,
        start: date,
        end: date,
        exclude_transaction_id: UUID | None = None,
    ) -> int: ...

    async def append(self, entry: LedgerEntry) -> None: ...

    async def for_transaction(self, transaction_id: UUID) -> list[LedgerEntry]: ...


class InMemoryLedgerStore:
    """Process-local ledger store."""

    def __init__(self):
        self.entries: list[LedgerEntry] = []

    async def sum(
        self,
        instrument_id: UUID,
        start: date,
        end: date,
        exclude_transaction_id: UUID | None = None,
    ) -> int:
        return sum(
            entry.bonus_points
            for entry in self.entries
            if entry.instrument_id == instrument_id
            and start <= utc_date(entry.occurred_at) <= end
            and (exclude_transaction_id is None or entry.transaction_id != exclude_transaction_id)
        )

    async def append(self, entry: LedgerEntry) -> None:
        if entry.created_at is None:
            entry = entry.model_copy(update={"created_at": datetime.now(timezone.utc)})
        self.entries.append(entry)

    async def for_transaction(self, transaction_id: UUID) -> list[LedgerEntry]:
        return [entry for entry in self.entries if entry.transaction_id == transaction_id]


class KeyedLocks:
    """Lazily created asyncio locks, one per key."""

    def __init__(self):
        self._locks: dict[Hashable, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def get(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock


@dataclass(frozen=True)
class LedgerState:
    """Bonus points already consumed in the period being calculated."""

    used_bonus_points: int = 0
    provisional: bool = False


class BonusPointsLedger:
    """Cap-aware access to a `LedgerStore`."""

    def __init__(self, store: LedgerStore, locks: KeyedLocks | None = None):
        self.store = store
        self.locks = locks if locks is not None else KeyedLocks()

    def lock(self, instrument_id: UUID, period: StatementPeriod) -> asyncio.Lock:
        return self.locks.get((instrument_id, period.start))

    async def used_bonus_points(
        self,
        instrument_id: UUID,
        period: StatementPeriod,
        excluding_transaction_id: UUID | None = None,
    ) -> int:
        used = await self.store.sum(instrument_id, period.start, period.end, excluding_transaction_id)
        return max(0, used)

    async def state(
        self,
        instrument_id: UUID,
        period: StatementPeriod,
        excluding_transaction_id: UUID | None = None,
    ) -> LedgerState:
        """Read consumed bonus points, degrading to 0 (provisional) if the store fails."""
        try:
            used = await self.used_bonus_points(instrument_id, period, excluding_transaction_id)
        except LedgerError as exc:
            logger.warning(
                "Ledger unavailable, treating used bonus points as 0",
                extra={
                    "error_code": exc.error_code,
                    "instrument_id": str(instrument_id),
                    "period_start": period.start.isoformat(),
                },
            )
            return LedgerState(used_bonus_points=0, provisional=True)
        return LedgerState(used_bonus_points=used)

    async def record(
        self,
        transaction_id: UUID,
        instrument_id: UUID,
        bonus_points: int,
        occurred_at: datetime,
    ) -> LedgerEntry | None:
        """Append a movement. Zero-point movements are not recorded."""
        if bonus_points == 0:
            return None
        entry = LedgerEntry(
            transaction_id=transaction_id,
            instrument_id=instrument_id,
            bonus_points=bonus_points,
            occurred_at=occurred_at,
        )
        await self.store.append(entry)
        return entry

    async def reverse(self, transaction_id: UUID) -> list[LedgerEntry]:
        """Offset every outstanding movement of a transaction.

        Movements are netted per (instrument, occurred_at) and each non-zero
        net gets a negating movement with the same timestamp, so the reversal
        lands in the period the original counted against.
        """
        nets: dict[tuple[UUID, datetime], int] = defaultdict(int)
        for entry in await self.store.for_transaction(transaction_id):
            nets[(entry.instrument_id, entry.occurred_at)] += entry.bonus_points

        reversals = []
        for (instrument_id, occurred_at), net in nets.items():
            if net == 0:
                continue
            entry = LedgerEntry(
                transaction_id=transaction_id,
                instrument_id=instrument_id,
                bonus_points=-net,
                occurred_at=occurred_at,
            )
            await self.store.append(entry)
            reversals.append(entry)
        return reversals

    async def replace(
        self,
        transaction_id: UUID,
        instrument_id: UUID,
        bonus_points: int,
        occurred_at: datetime,
    ) -> LedgerEntry | None:
        """Reverse the transaction's prior movements, then record the new amount."""
        await self.reverse(transaction_id)
        return await self.record(transaction_id, instrument_id, bonus_points, occurred_at)

    async def reserve(
        self,
        transaction_id: UUID,
        instrument_id: UUID,
        period: StatementPeriod,
        requested: int,
        cap: int,
        occurred_at: datetime,
    ) -> int:
        """Grant up to `requested` bonus points without exceeding `cap`.

        The read of consumed points and the write of the grant happen under
        the (instrument, period) lock. The transaction's own earlier movements
        do not count against it and are replaced by the grant.
        """
        async with self.lock(instrument_id, period):
            used = await self.used_bonus_points(instrument_id, period, transaction_id)
            granted = max(0, min(requested, cap - used))
            await self.replace(transaction_id, instrument_id, granted, occurred_at)
        logger.debug(
            "Bonus points reserved",
            extra={
                "transaction_id": str(transaction_id),
                "instrument_id": str(instrument_id),
                "requested": requested,
                "granted": granted,
                "cap": cap,
            },
        )
        return granted
