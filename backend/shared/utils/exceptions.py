"""
Centralized exceptions for consistent error handling.

Domain services raise these synchronously at the point of the offending
operation. Each one is also an HTTPException, so the REST layer returns it
without translation.

Usage:
    from shared.utils.exceptions import NotFoundError, ValidationError, StockExceededError

    raise NotFoundError("Order", order_id)
    raise ValidationError("Table number is required.", field="table_number")
    raise StockExceededError("Margherita Pizza", available=5, requested=6)
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def __str__(self) -> str:
        return str(self.detail)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Order", "ord_1f2e")
        raise NotFoundError("Cart line", 3)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: str | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


class MenuItemNotFoundError(NotFoundError):
    """Menu item not found in the catalog."""

    def __init__(self, item_id: str | None = None, **log_context: Any):
        super().__init__("Menu item", item_id, **log_context)


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Customer name is required.")
        raise ValidationError("Invalid quantity", field="quantity", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InvalidStateError(ValidationError):
    """Entity is in an invalid state for the operation."""

    def __init__(self, entity: str, current_state: str, expected_states: list[str] | None = None, **log_context: Any):
        if expected_states:
            states_str = ", ".join(expected_states)
            detail = f"{entity} is in state '{current_state}', expected: {states_str}"
        else:
            detail = f"{entity} cannot be in state '{current_state}' for this operation"

        super().__init__(detail, entity=entity, current_state=current_state, **log_context)


class InvalidTransitionError(ValidationError):
    """Invalid status transition."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        detail = f"Invalid transition from '{from_status}' to '{to_status}' for {entity}"
        super().__init__(detail, entity=entity, from_status=from_status, to_status=to_status, **log_context)


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("Line has already been sent to the kitchen")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class StockExceededError(ConflictError):
    """Requested quantity exceeds the remaining stock of a menu item."""

    def __init__(self, item_name: str, available: int, requested: int, **log_context: Any):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Not enough stock for {item_name}. Only {available} available.",
            item_name=item_name,
            available=available,
            requested=requested,
            **log_context,
        )


# =============================================================================
# 5xx External Service Errors
# =============================================================================


class ExternalServiceError(AppException):
    """External service error (502 or 503)."""

    def __init__(
        self,
        service: str,
        is_unavailable: bool = False,
        **log_context: Any,
    ):
        if is_unavailable:
            status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            detail = f"Service {service} temporarily unavailable"
        else:
            status_code = status.HTTP_502_BAD_GATEWAY
            detail = f"Error communicating with {service}"

        super().__init__(
            status_code=status_code,
            detail=detail,
            log_level="error",
            service=service,
            **log_context,
        )
