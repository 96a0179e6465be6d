import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from redeem_core.service.exceptions import (
    CaptchaRequired,
    CodeUsed,
    CsvEmpty,
    EmailDeliveryFailed,
    InvalidCode,
    InvalidCredentials,
    IpBlocked,
    JobNotFound,
    MissingFields,
    PromoEnded,
    PromoNotStarted,
    RedeemCoreError,
    Unauthorized,
    ValidationFailed,
)

log = logging.getLogger(__name__)

REDEEM_PATH = "/api/redeem"

STATUS_CODES = {
    MissingFields: status.HTTP_400_BAD_REQUEST,
    ValidationFailed: status.HTTP_400_BAD_REQUEST,
    CaptchaRequired: status.HTTP_400_BAD_REQUEST,
    CodeUsed: status.HTTP_400_BAD_REQUEST,
    CsvEmpty: status.HTTP_400_BAD_REQUEST,
    PromoNotStarted: status.HTTP_403_FORBIDDEN,
    PromoEnded: status.HTTP_403_FORBIDDEN,
    InvalidCode: status.HTTP_404_NOT_FOUND,
    JobNotFound: status.HTTP_404_NOT_FOUND,
    IpBlocked: status.HTTP_429_TOO_MANY_REQUESTS,
    Unauthorized: status.HTTP_401_UNAUTHORIZED,
    InvalidCredentials: status.HTTP_401_UNAUTHORIZED,
    EmailDeliveryFailed: status.HTTP_502_BAD_GATEWAY,
}


def status_code_for(error: RedeemCoreError) -> int:
    for cls in type(error).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(error: RedeemCoreError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code_for(error),
        content={"error": error.error_code, "message": error.message},
    )


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(RedeemCoreError)
    async def handle_domain_error(request: Request, e: RedeemCoreError):
        log.debug(f"{request.method} {request.url.path} rejected: {e.error_code}")
        return error_response(e)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, e: RequestValidationError):
        if request.url.path == REDEEM_PATH:
            return error_response(MissingFields())
        errors = e.errors()
        message = errors[0].get("msg") if errors else None
        return error_response(ValidationFailed(message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, e: Exception):
        log.exception(f"unhandled error in {request.method} {request.url.path}")
        return error_response(RedeemCoreError())
