from typing import Optional

from pydantic import BaseModel, Field


class RedeemRequest(BaseModel):
    code: str = Field(min_length=1)
    captcha_token: str = Field(default="", alias="captchaToken")


class RedeemResult(BaseModel):
    success: bool = True
    link: str


class BlockStatus(BaseModel):
    blocked: bool
    minutes_remaining: Optional[int] = None
