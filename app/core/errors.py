# app/core/errors.py
from __future__ import annotations

from typing import Any, Dict, Optional


class AuthError(Exception):
    """Expected failure translated to ``{"error": {"code", "message"}}`` at the HTTP boundary."""

    status_code: int = 400
    code: str = "BAD_REQUEST"
    message: str = "Bad request"

    def __init__(self, message: Optional[str] = None, *, details: Any = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.details = details

    def to_body(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return {"error": error}


class InvalidCredentials(AuthError):
    status_code = 401
    code = "INVALID_CREDENTIALS"
    message = "Invalid credentials"


class InvalidRefreshToken(AuthError):
    status_code = 401
    code = "INVALID_REFRESH"
    message = "Invalid refresh token"


class InvalidResetToken(AuthError):
    status_code = 400
    code = "INVALID_TOKEN"
    message = "Invalid token"


class Unauthorized(AuthError):
    status_code = 401
    code = "UNAUTHORIZED"
    message = "Invalid or missing token"


class Forbidden(AuthError):
    status_code = 403
    code = "FORBIDDEN"
    message = "Insufficient role"


class TenantIdRequired(AuthError):
    status_code = 400
    code = "PORTAL_ID_REQUIRED"
    message = "X-Portal-ID header or token portalId is required"


class AccountExists(AuthError):
    status_code = 400
    code = "USER_EXISTS"
    message = "User already exists"


class NotFound(AuthError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Resource not found"


__all__ = [
    "AuthError",
    "InvalidCredentials",
    "InvalidRefreshToken",
    "InvalidResetToken",
    "Unauthorized",
    "Forbidden",
    "TenantIdRequired",
    "AccountExists",
    "NotFound",
]
