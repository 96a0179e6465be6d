from fastapi import APIRouter, Depends

from redeem_core.data_model.admin import AdminToken, LoginCodeRequest, LoginCodeVerification
from redeem_core.data_model.base import Success
from redeem_core.service.container import Services
from redeem_core.web.dependencies import get_services

router = APIRouter(
    prefix="/login",
)


@router.post("/request-code", response_model=Success)
async def request_code(body: LoginCodeRequest, services: Services = Depends(get_services)):
    await services.admin_auth.request_login_code(body.email)
    return Success()


@router.post("/verify-code", response_model=AdminToken)
async def verify_code(body: LoginCodeVerification, services: Services = Depends(get_services)):
    token = await services.admin_auth.verify_login_code(body.email, body.code)
    return AdminToken(token=token)
