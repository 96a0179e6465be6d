from typing import Optional


class RedeemCoreError(Exception):
    """
    Base for all errors that end up in an API response.
    Each subclass carries a stable error code that clients can switch on,
    the message is meant for humans.
    """

    error_code = "internal_error"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingFields(RedeemCoreError):
    error_code = "missing_fields"
    default_message = "Please fill in all fields"


class ValidationFailed(RedeemCoreError):
    error_code = "validation_error"
    default_message = "Invalid request"


class CaptchaRequired(RedeemCoreError):
    error_code = "captcha"
    default_message = "Captcha verification failed"


class PromoNotStarted(RedeemCoreError):
    error_code = "not_started"
    default_message = "The promotion has not started yet"


class PromoEnded(RedeemCoreError):
    error_code = "ended"
    default_message = "The promotion has ended"


class IpBlocked(RedeemCoreError):
    error_code = "blocked"
    default_message = "Too many failed attempts. Please try again later."

    def __init__(self, minutes_remaining: Optional[int] = None, message: Optional[str] = None):
        self.minutes_remaining = minutes_remaining
        if message is None and minutes_remaining is not None:
            message = f"Too many attempts. Try again in {minutes_remaining} minutes."
        super().__init__(message)


class InvalidCode(RedeemCoreError):
    error_code = "invalid"
    default_message = "Invalid code"


class CodeUsed(RedeemCoreError):
    error_code = "used"
    default_message = "This code has already been used"


class CsvEmpty(RedeemCoreError):
    error_code = "csv_empty"
    default_message = "The CSV data contains no usable lines"


class JobNotFound(RedeemCoreError):
    error_code = "job_not_found"
    default_message = "Import job not found"


class Unauthorized(RedeemCoreError):
    error_code = "unauthorized"
    default_message = "Authentication required"


class InvalidToken(Unauthorized):
    default_message = "Invalid or expired token"


class InvalidCredentials(RedeemCoreError):
    error_code = "invalid_credentials"
    default_message = "Invalid or expired login code"


class EmailDeliveryFailed(RedeemCoreError):
    error_code = "email_failed"
    default_message = "Could not send the login code"
