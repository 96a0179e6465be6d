from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, field_validator

START_DATE = "start_date"
END_DATE = "end_date"


class CampaignSettings(BaseModel):
    start_date: str = ""
    end_date: str = ""


class CampaignSettingsUpdate(CampaignSettings):
    @field_validator(START_DATE, END_DATE, mode="before")
    @classmethod
    def check_timestamp(cls, value):
        if value is None:
            return ""
        value = str(value).strip()
        if value:
            parse_timestamp(value)
        return value


class CampaignWindow(BaseModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def has_started(self, now: datetime) -> bool:
        return self.start is None or self.start <= now

    def has_ended(self, now: datetime) -> bool:
        return self.end is not None and self.end < now


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp as stored in the settings table.
    An empty value means "unbounded" and yields None.
    Timestamps without an offset are taken to be UTC.
    """
    if not value:
        return None
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
