import logging
from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel

from redeem_core.util.misc import utc_now

log = logging.getLogger(__name__)

router = APIRouter(
    prefix="/health",
)


class Health(BaseModel):
    status: str
    time: datetime


@router.get("", response_model=Health)
def health():
    return Health(status="ok", time=utc_now())
