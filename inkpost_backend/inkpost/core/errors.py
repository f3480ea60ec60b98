from __future__ import annotations


class AppError(Exception):
    """Error carrying the HTTP status it should be rendered with."""

    status_code = 500
    default_message = "An unknown error occurred"

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationFailed(AppError):
    status_code = 422
    default_message = "Fill in all fields"


class PayloadTooLarge(AppError):
    status_code = 413
    default_message = "File too big"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentials(AppError):
    # Same message for unknown email and wrong password
    status_code = 422
    default_message = "Invalid credentials"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Conflict(AppError):
    status_code = 409
    default_message = "Already exists"


class Internal(AppError):
    status_code = 500
