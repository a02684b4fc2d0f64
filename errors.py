"""Application error taxonomy.

Services raise these; ``main.py`` renders every ``AppError`` as
``{"success": false, "message": ..., "code": ...}`` with ``status_code``.
Delivery and internal failures carry a generic public message; the raw
detail is kept on ``detail`` and only exposed in development mode.
"""
from __future__ import annotations


class AppError(Exception):
    status_code = 500
    code = "internal_error"
    public_message = "Internal server error"

    def __init__(self, message: str | None = None, detail: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message
        self.detail = detail


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"
    public_message = "Invalid request"


class AuthenticationError(AppError):
    status_code = 401
    code = "invalid_credentials"
    public_message = "Invalid credentials"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"
    public_message = "Not found"


class ConflictError(AppError):
    status_code = 400
    code = "conflict"
    public_message = "Resource already exists"


class IllegalTransitionError(ValidationError):
    code = "illegal_transition"

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot change payment status from {current} to {target}")
        self.current = current
        self.target = target


class OTPNotFoundError(ValidationError):
    code = "otp_not_found"
    public_message = "OTP not found or expired"


class OTPMismatchError(ValidationError):
    code = "otp_mismatch"
    public_message = "OTP doesn't match"


class OTPExpiredError(ValidationError):
    code = "otp_expired"
    public_message = "OTP expired"


class DeliveryError(AppError):
    status_code = 500
    code = "delivery_failed"
    public_message = "Failed to send email, please try again later"


class DeliveryTimeoutError(DeliveryError):
    code = "delivery_timeout"
    public_message = "The mail server is taking too long to respond, please try again shortly"


class InternalError(AppError):
    pass
