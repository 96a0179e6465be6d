from fastapi import APIRouter, Depends

from redeem_core.data_model.base import Success
from redeem_core.data_model.settings import CampaignSettingsUpdate
from redeem_core.service.container import Services
from redeem_core.web.dependencies import get_services

router = APIRouter(
    prefix="/settings",
)


@router.post("", response_model=Success)
async def update_settings(body: CampaignSettingsUpdate, services: Services = Depends(get_services)):
    await services.settings.update(body)
    return Success()
