"""Application error taxonomy.

Every error carries a message and the HTTP status it maps to. Errors that
wrap upstream failures only ever show their default message to API clients.
"""
from typing import Optional


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"
    expose_message = True

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        return self.message if self.expose_message else self.default_message


class ValidationError(AppError):
    """Bad or missing input, or a request against a project in the wrong state."""
    status_code = 400
    default_message = "Invalid request"


class InvalidTransitionError(ValidationError):
    default_message = "Illegal project status transition"


class AuthError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ProviderError(AppError):
    """Upstream LLM or hosting provider failure."""
    default_message = "Upstream provider error"
    expose_message = False


class DeploymentTimeoutError(AppError, TimeoutError):
    default_message = "Deployment timeout"
    expose_message = False


class ConfigurationError(AppError):
    default_message = "Service is not configured"
    expose_message = False


class PersistenceError(AppError):
    default_message = "Failed to save changes"


class DeploymentFailedError(AppError):
    default_message = "Failed to deploy project"
