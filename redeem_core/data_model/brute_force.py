from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class BruteForceRecord(BaseModel):
    ip: str
    attempts: int = 0
    last_attempt: datetime
    blocked_until: Optional[datetime] = None

    def __str__(self):
        return f"BruteForceRecord[{self.ip}, {self.attempts} attempts]"
