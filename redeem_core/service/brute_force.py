import logging
import math
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, Optional

import gconf

from redeem_core import db
from redeem_core.data_model.brute_force import BruteForceRecord
from redeem_core.data_model.redeem import BlockStatus
from redeem_core.db import db_conn
from redeem_core.util.misc import utc_now

log = logging.getLogger(__name__)


class BruteForceStore(ABC):
    @abstractmethod
    async def get(self, ip: str) -> Optional[BruteForceRecord]:
        ...

    @abstractmethod
    async def upsert(self, record: BruteForceRecord) -> None:
        ...

    @abstractmethod
    async def delete(self, ip: str) -> None:
        ...

    @abstractmethod
    async def delete_stale(self, last_attempt_before: datetime, now: datetime) -> int:
        ...


class DbBruteForceStore(BruteForceStore):
    async def get(self, ip: str) -> Optional[BruteForceRecord]:
        async with db_conn() as conn:
            return await db.brute_force.get(conn, ip)

    async def upsert(self, record: BruteForceRecord) -> None:
        async with db_conn() as conn:
            await db.brute_force.upsert(conn, record)

    async def delete(self, ip: str) -> None:
        async with db_conn() as conn:
            await db.brute_force.delete(conn, ip)

    async def delete_stale(self, last_attempt_before: datetime, now: datetime) -> int:
        async with db_conn() as conn:
            return await db.brute_force.delete_stale(conn, last_attempt_before, now)


class BruteForceGuard:
    """
    Counts failed redemptions per client ip and locks the ip out for a while
    once too many of them pile up.
    A lockout expires on its own: it is only compared against the clock when read.
    """

    def __init__(
        self,
        store: BruteForceStore,
        max_attempts: int = None,
        block_duration: timedelta = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.max_attempts = max_attempts or gconf.get("redeem.brute_force.max_attempts", default=5)
        self.block_duration = block_duration or timedelta(
            minutes=gconf.get("redeem.brute_force.block_duration_minutes", default=15)
        )
        self.clock = clock

    async def get_attempts(self, ip: str) -> Optional[BruteForceRecord]:
        return await self.store.get(ip)

    async def is_blocked(self, ip: str) -> BlockStatus:
        record = await self.store.get(ip)
        if not record or not record.blocked_until:
            return BlockStatus(blocked=False)
        now = self.clock()
        if record.blocked_until <= now:
            return BlockStatus(blocked=False)
        return BlockStatus(
            blocked=True,
            minutes_remaining=_minutes_until(record.blocked_until, now),
        )

    async def record_failed_attempt(self, ip: str) -> BlockStatus:
        record = await self.store.get(ip)
        attempts = (record.attempts if record else 0) + 1
        now = self.clock()
        updated = BruteForceRecord(ip=ip, attempts=attempts, last_attempt=now)
        if attempts >= self.max_attempts:
            updated.blocked_until = now + self.block_duration
        await self.store.upsert(updated)

        if updated.blocked_until:
            log.warning(f"blocking {ip} after {attempts} failed attempts")
            return BlockStatus(
                blocked=True,
                minutes_remaining=_minutes_until(updated.blocked_until, now),
            )
        log.debug(f"failed attempt {attempts} of {self.max_attempts} from {ip}")
        return BlockStatus(blocked=False)

    async def clear_attempts(self, ip: str) -> None:
        await self.store.delete(ip)

    async def sweep_stale(self, retention: timedelta = None) -> int:
        retention = retention or timedelta(
            hours=gconf.get("redeem.brute_force.retention_hours", default=24)
        )
        now = self.clock()
        deleted = await self.store.delete_stale(now - retention, now)
        if deleted:
            log.debug(f"removed {deleted} stale brute force records")
        return deleted


def _minutes_until(moment: datetime, now: datetime) -> int:
    return math.ceil((moment - now).total_seconds() / 60)
