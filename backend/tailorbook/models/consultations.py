"""
Consultation model - personalised tailor consultation requests.
"""
from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID, uuid4
import enum

from sqlalchemy import String, Date, DateTime, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from tailorbook.lib.db import Base


class ConsultationServiceType(str, enum.Enum):
    """How the consultation takes place."""
    REMOTE_CALL = "Remote Call (Phone/Video)"
    DOORSTEP_VISIT = "Doorstep Visit (Tailor comes to you)"
    IN_STUDIO = "In-Studio Appointment"


class ConsultationStatus(str, enum.Enum):
    """Consultation status. No transition graph; any value may follow any other."""
    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    RESCHEDULED = "RESCHEDULED"


class Consultation(Base):
    """
    Consultation entity.
    address is only stored for doorstep visits.
    """
    __tablename__ = "consultations"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )

    # Client
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    client_phone: Mapped[str] = mapped_column(String(20), nullable=False)

    # Appointment
    service_type: Mapped[ConsultationServiceType] = mapped_column(
        SQLEnum(
            ConsultationServiceType,
            name="consultation_service_type",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=ConsultationServiceType.REMOTE_CALL,
    )
    preferred_date: Mapped[date] = mapped_column(Date, nullable=False)
    preferred_time: Mapped[str] = mapped_column(String(50), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Style profile
    occasion: Mapped[str] = mapped_column(String(255), nullable=False)
    style_archetype: Mapped[str] = mapped_column(String(255), nullable=False)
    body_shape: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    comfort_preference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    inspiration_link: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    status: Mapped[ConsultationStatus] = mapped_column(
        SQLEnum(
            ConsultationStatus,
            name="consultation_status",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=ConsultationStatus.PENDING_CONFIRMATION,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Consultation(id={self.id}, client={self.client_email}, status={self.status})>"
