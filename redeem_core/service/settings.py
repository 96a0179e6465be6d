import logging
from abc import ABC, abstractmethod
from typing import Dict

from redeem_core import db
from redeem_core.data_model.settings import (
    CampaignSettings,
    CampaignSettingsUpdate,
    CampaignWindow,
    START_DATE,
    END_DATE,
    parse_timestamp,
)
from redeem_core.db import db_conn

log = logging.getLogger(__name__)


class SettingsStore(ABC):
    @abstractmethod
    async def get_all(self) -> Dict[str, str]:
        ...

    @abstractmethod
    async def set_many(self, values: Dict[str, str]) -> None:
        ...


class DbSettingsStore(SettingsStore):
    async def get_all(self) -> Dict[str, str]:
        async with db_conn() as conn:
            return await db.settings.get_all(conn)

    async def set_many(self, values: Dict[str, str]) -> None:
        async with db_conn() as conn:
            await db.settings.set_many(conn, values)


class CampaignSettingsService:
    def __init__(self, store: SettingsStore):
        self.store = store

    async def get_all(self) -> CampaignSettings:
        values = await self.store.get_all()
        return CampaignSettings(
            start_date=values.get(START_DATE) or "",
            end_date=values.get(END_DATE) or "",
        )

    async def update(self, update: CampaignSettingsUpdate) -> CampaignSettings:
        await self.store.set_many({START_DATE: update.start_date, END_DATE: update.end_date})
        log.info(f"campaign window set to [{update.start_date or '-'}, {update.end_date or '-'}]")
        return CampaignSettings(start_date=update.start_date, end_date=update.end_date)

    async def get_window(self) -> CampaignWindow:
        settings = await self.get_all()
        return CampaignWindow(
            start=_parse_or_unbounded(START_DATE, settings.start_date),
            end=_parse_or_unbounded(END_DATE, settings.end_date),
        )


def _parse_or_unbounded(key: str, value: str):
    try:
        return parse_timestamp(value)
    except ValueError:
        log.warning(f"ignoring invalid {key} setting: {value!r}")
        return None
