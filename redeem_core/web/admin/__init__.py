from fastapi import APIRouter, Depends

from redeem_core.web.dependencies import require_admin
from . import login, settings, imports, codes

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
)

router.include_router(login.router)

_protected = APIRouter(dependencies=[Depends(require_admin)])
_protected.include_router(settings.router)
_protected.include_router(imports.router)
_protected.include_router(codes.router)

router.include_router(_protected)
