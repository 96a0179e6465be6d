from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class AdminUser(BaseModel):
    id: int
    name: str
    email: str
    created_at: Optional[datetime] = None

    def __str__(self):
        return f"AdminUser[{self.id}, {self.email}]"


class AdminLoginCode(BaseModel):
    id: int
    email: str
    code: str
    expires_at: datetime
    created_at: Optional[datetime] = None


class AdminClaims(BaseModel):
    sub: str
    email: str

    @property
    def admin_id(self) -> int:
        return int(self.sub)


class LoginCodeRequest(BaseModel):
    email: EmailStr


class LoginCodeVerification(BaseModel):
    email: EmailStr
    code: str = Field(min_length=1)


class AdminToken(BaseModel):
    success: bool = True
    token: str
