import logging

from fastapi import APIRouter, Depends

from redeem_core.data_model.redeem import RedeemRequest, RedeemResult
from redeem_core.service.container import Services
from redeem_core.service.exceptions import CaptchaRequired, MissingFields
from redeem_core.web.dependencies import get_client_ip, get_services

log = logging.getLogger(__name__)

router = APIRouter(
    prefix="/redeem",
)


@router.post("", response_model=RedeemResult)
async def redeem(
    body: RedeemRequest,
    ip: str = Depends(get_client_ip),
    services: Services = Depends(get_services),
):
    if not body.code.strip():
        raise MissingFields
    if not await services.captcha.verify(body.captcha_token, ip):
        log.info(f"captcha rejected for {ip}")
        raise CaptchaRequired
    return await services.redeem.redeem(body.code, ip)
