"""
Application error taxonomy.

Every failure the API reports carries a stable machine-checkable ``code`` and a
human-readable ``message``; ``app.main`` renders them as
``{"detail": {"code": ..., "message": ...}}``.
"""
from typing import Any, Optional


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.message
        self.extra = extra
        super().__init__(self.message)

    def to_detail(self) -> dict:
        detail = {"code": self.code, "message": self.message}
        detail.update(self.extra)
        return detail


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    message = "Resource already exists"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        if field:
            super().__init__(message, field=field)
        else:
            super().__init__(message)
        self.field = field


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"
    message = "Authentication required"


class TokenExpiredError(AppError):
    status_code = 403
    code = "TOKEN_EXPIRED"
    message = "Token has expired"


class TokenInvalidError(AppError):
    status_code = 403
    code = "TOKEN_INVALID"
    message = "Invalid token"


class UpstreamIdentityFailure(AppError):
    status_code = 502
    code = "UPSTREAM_IDENTITY_FAILURE"
    message = "Failed to create authentication user"


class AlreadyVerifiedError(AppError):
    status_code = 400
    code = "ALREADY_VERIFIED"
    message = "Already verified"


class InvalidVerificationToken(AppError):
    status_code = 401
    code = "INVALID_VERIFICATION_TOKEN"
    message = "Invalid verification token"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Not found"


class ValidationFailure(AppError):
    status_code = 400
    code = "VALIDATION_FAILED"
    message = "Validation failed"


class VerificationRequiredError(AppError):
    status_code = 403
    code = "VERIFICATION_REQUIRED"
    message = "Verification required"


class UpstreamMediaFailure(AppError):
    status_code = 502
    code = "UPSTREAM_MEDIA_FAILURE"
    message = "Failed to upload image"
