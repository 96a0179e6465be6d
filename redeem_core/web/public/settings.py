from fastapi import APIRouter, Depends

from redeem_core.data_model.settings import CampaignSettings
from redeem_core.service.container import Services
from redeem_core.web.dependencies import get_services

router = APIRouter(
    prefix="/settings",
)


@router.get("", response_model=CampaignSettings)
async def get_settings(services: Services = Depends(get_services)):
    return await services.settings.get_all()
