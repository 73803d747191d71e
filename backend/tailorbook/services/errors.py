"""Domain errors raised by the booking and consultation services.

Each maps onto one of the HTTP-aware base exceptions so routes can let them
propagate straight to the error handler.
"""
from typing import Any, Dict, Optional

from fastapi import status

from tailorbook.api.middleware.error_handler import (
    AppException,
    BadRequestException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
)


class BookingNotFound(NotFoundException):
    """Booking does not exist, or is not visible to the calling customer."""

    code = "booking_not_found"

    def __init__(self, booking_id: Any):
        super().__init__("Booking", str(booking_id))


class ProductNotFound(NotFoundException):
    code = "product_not_found"

    def __init__(self, product_type: str, product_id: Any):
        super().__init__(product_type, str(product_id))


class ConsultationNotFound(NotFoundException):
    code = "consultation_not_found"

    def __init__(self, consultation_id: Any):
        super().__init__("Consultation", str(consultation_id))


class UnknownProductType(BadRequestException):
    code = "unknown_product_type"

    def __init__(self, product_type: str):
        super().__init__(
            f"Invalid product type: {product_type}",
            details={"product_type": product_type},
        )


class InvalidStatusValue(BadRequestException):
    code = "invalid_status_value"

    def __init__(self, value: str, allowed: list[str]):
        super().__init__(
            f"Invalid status value: {value}",
            details={"status": value, "allowed": allowed},
        )


class IneligibleForReturn(BadRequestException):
    code = "ineligible_for_return"

    def __init__(self, current_status: str):
        super().__init__(
            f"Return can only be initiated for delivered items. Current status: {current_status}",
            details={"current_status": current_status},
        )


class IneligibleForDeletion(ForbiddenException):
    code = "ineligible_for_deletion"

    def __init__(self, resource: str, current_status: str, allowed: list[str]):
        super().__init__(
            f"Deletion denied. {resource} status is '{current_status}'. "
            f"Records can only be deleted when {', '.join(allowed)}.",
            details={"current_status": current_status, "allowed": allowed},
        )


class InvalidTransition(ConflictException):
    code = "invalid_transition"

    def __init__(self, from_status: str, to_status: str, reason: Optional[str] = None):
        message = f"Cannot move booking from '{from_status}' to '{to_status}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            details={"from_status": from_status, "to_status": to_status},
        )


class DuplicateReturnRequest(ConflictException):
    code = "duplicate_return_request"

    def __init__(self, booking_id: Any, existing_status: str):
        super().__init__(
            f"An active return request for this booking already exists with status: {existing_status}",
            details={"booking_id": str(booking_id), "existing_status": existing_status},
        )


class ConcurrentModification(ConflictException):
    code = "concurrent_modification"

    def __init__(self, booking_id: Any, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            "Booking was modified by another request; reload and retry",
            details={"booking_id": str(booking_id), **(details or {})},
        )


class ConsistencyFailure(AppException):
    """A booking and its return request could not be written together."""

    code = "consistency_failure"

    def __init__(self, booking_id: Any, operation: str, reason: str):
        super().__init__(
            f"Booking and return request are out of sync: {reason}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"code": self.code, "booking_id": str(booking_id), "operation": operation},
        )
