# backend/phishlens/errors.py
from typing import Any, Optional


class AppError(Exception):
    """Base error rendered as ``{"error": message, "details"?: details}``."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class DuplicateAccount(AppError):
    status_code = 400
    default_message = "User already exists"


class AuthenticationRequired(AppError):
    status_code = 401
    default_message = "Authentication required"


class InvalidCredentials(AppError):
    status_code = 401
    default_message = "Invalid credentials"


class NotAuthenticated(AppError):
    status_code = 401
    default_message = "Not authenticated"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class ExternalServiceError(AppError):
    """Provider or transport failure; ``details`` is the provider payload or message."""

    status_code = 500
    default_message = "External service failed"

    def __init__(self, provider: str, details: Any = None, message: Optional[str] = None):
        self.provider = provider
        super().__init__(message or f"{provider} analysis failed", details)
