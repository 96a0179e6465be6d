from fastapi import APIRouter

from . import health, settings, redeem

router = APIRouter(
    prefix="/api",
    tags=["public"],
)

router.include_router(health.router)
router.include_router(settings.router)
router.include_router(redeem.router)
