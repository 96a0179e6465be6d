import logging
import math
from abc import ABC, abstractmethod
from datetime import datetime
from typing import AsyncIterator, List, Optional, Sequence

import gconf

from redeem_core import db
from redeem_core.data_model.code import Code, CodeEntry, CodePage, RecentRedeem, RedeemedCode, Stats
from redeem_core.db import db_conn

log = logging.getLogger(__name__)


class CodeStore(ABC):
    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[Code]:
        ...

    @abstractmethod
    async def mark_used(self, code_id: int, ip: str, used_at: datetime) -> bool:
        """Returns False if the code was used in the meantime"""

    @abstractmethod
    async def insert_batch(self, entries: Sequence[CodeEntry]) -> int:
        """Inserts entries whose code does not exist yet, returns how many were inserted"""

    @abstractmethod
    async def get_page(self, *, limit: int, offset: int, search: Optional[str] = None) -> List[Code]:
        ...

    @abstractmethod
    async def count(self, search: Optional[str] = None) -> int:
        ...

    @abstractmethod
    async def count_used(self) -> int:
        ...

    @abstractmethod
    async def get_recent_redeemed(self, limit: int) -> List[RecentRedeem]:
        ...

    @abstractmethod
    def iter_redeemed(self) -> AsyncIterator[RedeemedCode]:
        ...


class DbCodeStore(CodeStore):
    async def get_by_code(self, code: str) -> Optional[Code]:
        async with db_conn() as conn:
            return await db.codes.get_by_code(conn, code)

    async def mark_used(self, code_id: int, ip: str, used_at: datetime) -> bool:
        async with db_conn() as conn:
            return await db.codes.mark_used(conn, code_id, ip, used_at)

    async def insert_batch(self, entries: Sequence[CodeEntry]) -> int:
        async with db_conn() as conn:
            return await db.codes.insert_batch(conn, entries)

    async def get_page(self, *, limit: int, offset: int, search: Optional[str] = None) -> List[Code]:
        async with db_conn() as conn:
            return await db.codes.get_page(conn, limit=limit, offset=offset, search=search)

    async def count(self, search: Optional[str] = None) -> int:
        async with db_conn() as conn:
            return await db.codes.count(conn, search)

    async def count_used(self) -> int:
        async with db_conn() as conn:
            return await db.codes.count_used(conn)

    async def get_recent_redeemed(self, limit: int) -> List[RecentRedeem]:
        async with db_conn() as conn:
            return await db.codes.get_recent_redeemed(conn, limit)

    async def iter_redeemed(self) -> AsyncIterator[RedeemedCode]:
        async with db_conn() as conn:
            async for row in db.codes.iter_redeemed(conn):
                yield row


class CodeService:
    def __init__(self, store: CodeStore):
        self.store = store

    async def get_page(self, page: int = 1, search: Optional[str] = None) -> CodePage:
        page_size = gconf.get("codes.page_size", default=50)
        page = max(page, 1)
        search = search.strip() if search else None
        codes = await self.store.get_page(limit=page_size, offset=(page - 1) * page_size, search=search)
        total = await self.store.count(search)
        return CodePage(
            codes=codes,
            total=total,
            page=page,
            total_pages=math.ceil(total / page_size),
        )

    async def stats(self) -> Stats:
        total = await self.store.count()
        used = await self.store.count_used()
        recent = await self.store.get_recent_redeemed(gconf.get("codes.recent_redeems", default=10))
        return Stats(total=total, used=used, available=total - used, recent=recent)

    def iter_redeemed(self) -> AsyncIterator[RedeemedCode]:
        return self.store.iter_redeemed()
