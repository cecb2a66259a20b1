"""
Domain error taxonomy.

Every rejected operation raises exactly one of these. Raising inside a
unit of work rolls the surrounding transaction back; the API layer turns
the error into ``{"detail": message, "code": code}`` with ``status_code``.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for expected, user-facing failures."""

    code = "error"
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self) -> dict[str, str]:
        return {"detail": self.message, "code": self.code}


class ValidationFailed(DomainError):
    code = "validation_failed"
    status_code = 400
    default_message = "Invalid input"


class InvalidType(ValidationFailed):
    code = "invalid_type"
    default_message = "Unsupported type"


class NotFound(DomainError):
    code = "not_found"
    status_code = 404
    default_message = "Resource not found"


class NotAvailable(DomainError):
    code = "not_available"
    status_code = 409
    default_message = "Field is not available on this day"


class OutsideHours(DomainError):
    code = "outside_hours"
    status_code = 409
    default_message = "Requested time is outside the field's opening hours"


class SlotConflict(DomainError):
    code = "slot_conflict"
    status_code = 409
    default_message = "This time slot conflicts with an existing booking"


class Unavailable(DomainError):
    code = "unavailable"
    status_code = 400
    default_message = "Product is not available"


class OutOfStock(DomainError):
    code = "out_of_stock"
    status_code = 409
    default_message = "Product is out of stock"


class InsufficientStock(DomainError):
    code = "insufficient_stock"
    status_code = 409
    default_message = "Not enough items in stock"

    def __init__(self, available: int, title: str | None = None):
        self.available = available
        if title:
            message = f"Insufficient stock for {title} (available: {available})"
        else:
            message = f"Only {available} items available in stock"
        super().__init__(message)


class Unauthorized(DomainError):
    code = "unauthorized"
    status_code = 401
    default_message = "Authentication required"


class Forbidden(DomainError):
    code = "forbidden"
    status_code = 403
    default_message = "You are not allowed to perform this action"


class InvalidStateTransition(DomainError):
    code = "invalid_state_transition"
    status_code = 409
    default_message = "Status change is not allowed"


class EmptyCart(DomainError):
    code = "empty_cart"
    status_code = 400
    default_message = "Cart is empty"
