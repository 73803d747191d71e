"""Consultation routes.

- POST /consultations/book: Request a consultation (public)
- GET /consultations: List requests (admin)
- PUT /consultations/{id}/status: Change status (admin)
- DELETE /consultations/{id}: Delete a cancelled/completed request (admin)
"""
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from tailorbook.api.dependencies import get_consultation_service, get_current_actor
from tailorbook.models.consultations import ConsultationServiceType, ConsultationStatus
from tailorbook.services.actor import Actor
from tailorbook.services.consultation_service import ConsultationService


router = APIRouter(prefix="/consultations", tags=["Consultations"])


class BookConsultationRequest(BaseModel):
    """Consultation request payload."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=20)
    service_type: ConsultationServiceType = ConsultationServiceType.REMOTE_CALL
    preferred_date: date
    preferred_time: str = Field(..., min_length=1, max_length=50)
    address: Optional[str] = Field(None, max_length=500)
    occasion: str = Field(..., min_length=1)
    style_archetype: str = Field(..., min_length=1)
    body_shape: Optional[str] = None
    comfort_preference: Optional[str] = None
    inspiration_link: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)


class ConsultationStatusRequest(BaseModel):
    status: str = Field(..., examples=["CONFIRMED"])


class ConsultationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_name: str
    client_email: str
    client_phone: str
    service_type: ConsultationServiceType
    preferred_date: date
    preferred_time: str
    address: Optional[str]
    occasion: str
    style_archetype: str
    body_shape: Optional[str]
    comfort_preference: Optional[str]
    inspiration_link: Optional[str]
    notes: Optional[str]
    status: ConsultationStatus
    created_at: datetime


class ConsultationMutationResponse(BaseModel):
    success: bool = True
    message: str
    data: ConsultationResponse


class ConsultationDeletedResponse(BaseModel):
    success: bool = True
    message: str


@router.post(
    "/book",
    response_model=ConsultationMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a consultation",
)
def book_consultation(
    request: BookConsultationRequest,
    service: ConsultationService = Depends(get_consultation_service),
):
    consultation = service.book_consultation(**request.model_dump())
    return ConsultationMutationResponse(
        message="Consultation request successfully submitted. Awaiting confirmation from our tailor team.",
        data=consultation,
    )


@router.get("", response_model=List[ConsultationResponse], summary="List consultations")
def list_consultations(
    actor: Actor = Depends(get_current_actor),
    service: ConsultationService = Depends(get_consultation_service),
):
    return service.list_consultations(actor)


@router.put("/{consultation_id}/status", response_model=ConsultationMutationResponse, summary="Update status")
def update_consultation_status(
    consultation_id: UUID,
    request: ConsultationStatusRequest,
    actor: Actor = Depends(get_current_actor),
    service: ConsultationService = Depends(get_consultation_service),
):
    consultation = service.update_status(actor, consultation_id, request.status)
    return ConsultationMutationResponse(
        message=f"Consultation status updated to {consultation.status.value}.",
        data=consultation,
    )


@router.delete("/{consultation_id}", response_model=ConsultationDeletedResponse, summary="Delete consultation")
def delete_consultation(
    consultation_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: ConsultationService = Depends(get_consultation_service),
):
    service.delete_consultation(actor, consultation_id)
    return ConsultationDeletedResponse(message="Consultation record successfully deleted.")
