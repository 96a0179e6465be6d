import logging

import gconf
from fastapi import Depends, Header, Request

from redeem_core.data_model.admin import AdminClaims
from redeem_core.service.container import Services
from redeem_core.service.exceptions import Unauthorized
from redeem_core.util.misc import str_to_bool

log = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_client_ip(request: Request) -> str:
    if str_to_bool(gconf.get("web.trust_forwarded_for", default="false")):
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded and forwarded.split(",")[0].strip():
            return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    # all such requests share one brute-force counter
    log.warning(f"no client address for {request.method} {request.url.path}, using \"{UNKNOWN_CLIENT}\"")
    return UNKNOWN_CLIENT


def require_admin(
    authorization: str = Header(None),
    services: Services = Depends(get_services),
) -> AdminClaims:
    if not authorization:
        raise Unauthorized
    return services.admin_auth.verify_token(authorization)
