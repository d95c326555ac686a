"""
Domain exception hierarchy shared by services and the HTTP layer.

Every error carries a machine readable ``code`` and free-form context used
for structured logging. The HTTP status is a class attribute so a single
exception handler can render all of them.
"""

from typing import Any


class StorefrontError(Exception):
    """Base exception for storefront errors."""

    status_code: int = 500
    default_code: str = "STOREFRONT_ERROR"

    def __init__(self, message: str, code: str | None = None, **context: Any):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.context = context


class ValidationError(StorefrontError):
    """Raised when input is missing, blank or otherwise unacceptable."""

    status_code = 400
    default_code = "VALIDATION_ERROR"


class InvalidTransitionError(StorefrontError):
    """Raised when an order status change is not allowed."""

    status_code = 409
    default_code = "INVALID_TRANSITION"

    def __init__(self, current_status: str, target_status: str, **context: Any):
        super().__init__(
            f"Cannot move order from {current_status} to {target_status}",
            current_status=current_status,
            target_status=target_status,
            **context,
        )
        self.current_status = current_status
        self.target_status = target_status


class OrderCreationError(StorefrontError):
    """Raised when any write of the order creation sequence fails."""

    status_code = 500
    default_code = "ORDER_CREATION_FAILED"


class NotFoundError(StorefrontError):
    """Raised when a referenced entity does not exist or is not visible."""

    status_code = 404
    default_code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any = None, **context: Any):
        message = f"{entity} not found"
        if entity_id is not None:
            message = f"{entity} not found: {entity_id}"
        super().__init__(message, entity=entity, entity_id=str(entity_id), **context)


class RepositoryError(StorefrontError):
    """Raised when a database operation fails."""

    status_code = 500
    default_code = "DATABASE_ERROR"


class UnauthorizedError(StorefrontError):
    """Raised when an action requires an authenticated session."""

    status_code = 401
    default_code = "UNAUTHORIZED"


class ForbiddenError(StorefrontError):
    """Raised when the authenticated user lacks the required role."""

    status_code = 403
    default_code = "FORBIDDEN"
