"""Booking routes.

Customer endpoints:
- POST /booking/book: Book a catalog product
- GET /booking/user: List own bookings
- POST /booking/{id}/return: Request a return for a delivered booking

Admin endpoints:
- GET /booking/all: List every booking
- GET /booking/returns: List return requests
- PATCH /booking/{id}/status: Move a booking along its lifecycle

Shared:
- DELETE /booking/{id}/delete: Admins delete any booking, customers their
  own finished ones
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field

from tailorbook.api.dependencies import get_booking_service, get_current_actor
from tailorbook.models.bookings import BookingStatus
from tailorbook.models.catalog import ProductType
from tailorbook.models.return_requests import ReturnStatus
from tailorbook.services.actor import Actor
from tailorbook.services.booking_lifecycle import BookingLifecycleService


router = APIRouter(prefix="/booking", tags=["Bookings"])


# Request/Response Models
class CreateBookingRequest(BaseModel):
    """Create booking payload."""
    product_type: str = Field(..., description="Catalog category tag", examples=["MenKurta"])
    product_id: str = Field(..., description="Catalog product id")
    notes: Optional[str] = Field(None, description="Measurements or styling requests")
    phone: Optional[str] = Field(None, max_length=20, description="Contact phone for this order")


class StatusUpdateRequest(BaseModel):
    """Admin status change payload."""
    status: Optional[str] = Field(None, description="Target booking status", examples=["confirmed"])
    admin_message: Optional[str] = Field(None, description="Replaces the message shown to the customer")
    expected_version: Optional[int] = Field(
        None,
        ge=1,
        description="Version the admin last saw; the update fails if the booking changed since",
    )
    refund_amount: Optional[Decimal] = Field(
        None,
        ge=0,
        description="Refund recorded on the return request (return_completed only)",
    )


class InitiateReturnRequest(BaseModel):
    """Customer return payload."""
    reason: Optional[str] = Field(None, description="Why the item is being returned")


class BookingResponse(BaseModel):
    """Booking as returned to clients."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    customer_id: UUID
    product_type: ProductType
    product_id: UUID
    product_title: Optional[str]
    product_image: Optional[str]
    contact_name: Optional[str]
    contact_phone: Optional[str]
    contact_email: Optional[str]
    notes: Optional[str]
    status: BookingStatus
    admin_message: str
    version: int
    created_at: datetime
    updated_at: datetime


class ReturnRequestResponse(BaseModel):
    """Return request as returned to clients."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    customer_id: UUID
    return_reason: str
    status: ReturnStatus
    request_date: datetime
    admin_notes: str
    refund_amount: float


class BookingMutationResponse(BaseModel):
    message: str
    booking: BookingResponse


class ReturnCreatedResponse(BaseModel):
    message: str
    return_request: ReturnRequestResponse
    booking: BookingResponse


class MessageResponse(BaseModel):
    message: str


# Customer routes
@router.post(
    "/book",
    response_model=BookingMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create booking",
)
def create_booking(
    request: CreateBookingRequest,
    actor: Actor = Depends(get_current_actor),
    service: BookingLifecycleService = Depends(get_booking_service),
):
    """Book a catalog product.

    Raises:
        400: Unknown product type
        404: Product not found
    """
    booking = service.create_booking(
        actor,
        product_type=request.product_type,
        product_id=request.product_id,
        notes=request.notes,
        phone=request.phone,
    )
    return BookingMutationResponse(message="Booking created", booking=booking)


@router.get("/user", response_model=List[BookingResponse], summary="List own bookings")
def list_user_bookings(
    actor: Actor = Depends(get_current_actor),
    service: BookingLifecycleService = Depends(get_booking_service),
):
    return service.list_customer_bookings(actor)


@router.post(
    "/{booking_id}/return",
    response_model=ReturnCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a return",
)
def initiate_return(
    booking_id: UUID,
    request: InitiateReturnRequest,
    actor: Actor = Depends(get_current_actor),
    service: BookingLifecycleService = Depends(get_booking_service),
):
    """Open a return for a delivered booking owned by the caller.

    Raises:
        400: Booking is not delivered
        404: Booking not found (or owned by someone else)
        409: An active return request already exists
        422: Reason missing
    """
    booking, return_request = service.initiate_return(actor, booking_id, request.reason)
    return ReturnCreatedResponse(
        message="Return request submitted successfully and booking status updated.",
        return_request=return_request,
        booking=booking,
    )


# Admin routes
@router.get("/all", response_model=List[BookingResponse], summary="List all bookings")
def list_all_bookings(
    actor: Actor = Depends(get_current_actor),
    service: BookingLifecycleService = Depends(get_booking_service),
):
    return service.list_all_bookings(actor)


@router.get("/returns", response_model=List[ReturnRequestResponse], summary="List return requests")
def list_return_requests(
    status_filter: Optional[str] = Query(None, alias="status", description="Only return requests in this status"),
    actor: Actor = Depends(get_current_actor),
    service: BookingLifecycleService = Depends(get_booking_service),
):
    return service.list_return_requests(actor, status=status_filter)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingMutationResponse,
    summary="Update booking status",
)
def update_booking_status(
    booking_id: UUID,
    request: StatusUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    service: BookingLifecycleService = Depends(get_booking_service),
):
    """Move a booking to its next status.

    Raises:
        400: Unknown status value
        403: Caller is not an admin
        404: Booking not found
        409: Transition not allowed, or booking changed since expected_version
        500: Booking and return request could not be kept in sync
    """
    booking = service.admin_transition(
        actor,
        booking_id,
        request.status,
        admin_message=request.admin_message,
        expected_version=request.expected_version,
        refund_amount=request.refund_amount,
    )
    return BookingMutationResponse(message=f"Booking updated to {booking.status.value}", booking=booking)


@router.delete("/{booking_id}/delete", response_model=MessageResponse, summary="Delete booking")
def delete_booking(
    booking_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: BookingLifecycleService = Depends(get_booking_service),
):
    service.delete_booking(actor, booking_id)
    return MessageResponse(message="Booking deleted successfully")
