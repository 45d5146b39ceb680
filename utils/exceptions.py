"""
Domain errors raised by the session layer and the views.
Each one carries the HTTP status and machine code it renders as; see
api.errors.register_error_handlers.
"""
from __future__ import annotations


class ApiError(Exception):
    status_code = 500
    error = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    error = "VALIDATION_ERROR"
    default_message = "Invalid input"


class NotFoundError(ApiError):
    status_code = 404
    error = "NOT_FOUND"
    default_message = "Resource not found"


class InvalidCredentialsError(ApiError):
    # 404 mirrors the existing client contract for failed logins
    status_code = 404
    error = "INVALID_CREDENTIALS"
    default_message = "Password is incorrect"


class ConflictError(ApiError):
    status_code = 409
    error = "CONFLICT"
    default_message = "Conflict"


class UnauthorizedError(ApiError):
    status_code = 401
    error = "UNAUTHORIZED"
    default_message = "Unauthorized request"


class InvalidTokenError(UnauthorizedError):
    error = "INVALID_TOKEN"
    default_message = "Invalid token"


class ExpiredTokenError(InvalidTokenError):
    error = "TOKEN_EXPIRED"
    default_message = "Token expired"


class TokenReuseError(InvalidTokenError):
    error = "TOKEN_REUSED"
    default_message = "Refresh token is expired or used"


class MediaUploadError(ApiError):
    status_code = 400
    error = "UPLOAD_FAILED"
    default_message = "Error while uploading file"
