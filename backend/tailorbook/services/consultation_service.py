"""Consultation desk.

Customers (signed in or not) request a tailor consultation; admins confirm,
cancel or complete them. Unlike bookings there is no transition graph: any
status may follow any other. Records may only be deleted once they are
cancelled or completed.
"""
from datetime import date
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from tailorbook.api.middleware.error_handler import ForbiddenException, ValidationException
from tailorbook.lib.logging import get_logger
from tailorbook.models.consultations import (
    Consultation,
    ConsultationServiceType,
    ConsultationStatus,
)
from tailorbook.services.actor import Actor
from tailorbook.services.errors import (
    ConsultationNotFound,
    IneligibleForDeletion,
    InvalidStatusValue,
)


logger = get_logger(__name__)


DELETABLE_STATUSES = (ConsultationStatus.CANCELLED, ConsultationStatus.COMPLETED)


class ConsultationService:
    """Consultation request handling."""

    def __init__(self, session: Session):
        self.session = session

    def book_consultation(
        self,
        *,
        name: str,
        email: str,
        phone: str,
        service_type: ConsultationServiceType,
        preferred_date: date,
        preferred_time: str,
        occasion: str,
        style_archetype: str,
        address: Optional[str] = None,
        body_shape: Optional[str] = None,
        comfort_preference: Optional[str] = None,
        inspiration_link: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Consultation:
        """Store a new consultation request in PENDING_CONFIRMATION.

        Raises:
            ValidationException: doorstep visit requested without an address
        """
        is_doorstep = service_type == ConsultationServiceType.DOORSTEP_VISIT
        address = address.strip() if address else None
        if is_doorstep and not address:
            raise ValidationException(
                "Address is required for a Doorstep Visit consultation.",
                errors={"address": "required for doorstep visits"},
            )

        consultation = Consultation(
            client_name=name.strip(),
            client_email=email.strip().lower(),
            client_phone=phone.strip(),
            service_type=service_type,
            preferred_date=preferred_date,
            preferred_time=preferred_time,
            address=address if is_doorstep else None,
            occasion=occasion,
            style_archetype=style_archetype,
            body_shape=body_shape,
            comfort_preference=comfort_preference,
            inspiration_link=inspiration_link,
            notes=notes,
            status=ConsultationStatus.PENDING_CONFIRMATION,
        )
        self.session.add(consultation)
        self.session.commit()

        logger.info(f"Consultation {consultation.id} requested ({service_type.value})")
        return consultation

    def list_consultations(self, actor: Actor) -> Sequence[Consultation]:
        self._require_admin(actor)
        stmt = select(Consultation).order_by(Consultation.created_at.desc())
        return self.session.execute(stmt).scalars().all()

    def update_status(self, actor: Actor, consultation_id: UUID, status: str) -> Consultation:
        self._require_admin(actor)
        try:
            new_status = ConsultationStatus(status)
        except ValueError:
            raise InvalidStatusValue(status, [s.value for s in ConsultationStatus])

        consultation = self._get(consultation_id)
        consultation.status = new_status
        self.session.commit()

        logger.info(f"Consultation {consultation_id} moved to {new_status.value} by {actor.id}")
        return consultation

    def delete_consultation(self, actor: Actor, consultation_id: UUID) -> None:
        self._require_admin(actor)
        consultation = self._get(consultation_id)
        if consultation.status not in DELETABLE_STATUSES:
            raise IneligibleForDeletion(
                "Consultation",
                consultation.status.value,
                [s.value for s in DELETABLE_STATUSES],
            )

        self.session.delete(consultation)
        self.session.commit()
        logger.info(f"Consultation {consultation_id} deleted by {actor.id}")

    def _require_admin(self, actor: Actor) -> None:
        if not actor.is_admin:
            raise ForbiddenException("Admin access required")

    def _get(self, consultation_id: UUID) -> Consultation:
        consultation = self.session.get(Consultation, consultation_id)
        if consultation is None:
            raise ConsultationNotFound(consultation_id)
        return consultation
