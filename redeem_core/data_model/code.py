from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from redeem_core.data_model.base import CamelModel


class Code(BaseModel):
    id: int
    code: str
    link: str
    is_used: bool = False
    used_at: Optional[datetime] = None
    ip_address: Optional[str] = None

    def __str__(self):
        return f"Code[{self.id}, {self.code}]"


class CodeEntry(BaseModel):
    code: str
    link: str


class CodePage(CamelModel):
    codes: List[Code]
    total: int
    page: int
    total_pages: int


class RedeemedCode(BaseModel):
    code: str
    link: str
    used_at: Optional[datetime] = None
    ip_address: Optional[str] = None


class RecentRedeem(BaseModel):
    code: str
    ip_address: Optional[str] = None
    used_at: Optional[datetime] = None


class Stats(BaseModel):
    total: int
    used: int
    available: int
    recent: List[RecentRedeem] = []
