"""
ReturnRequest model - a customer's request to send back a delivered booking.
"""
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4
import enum

from sqlalchemy import Text, Numeric, DateTime, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from tailorbook.lib.db import Base


class ReturnStatus(str, enum.Enum):
    """Return request status; values match the booking's return statuses."""
    RETURN_PENDING = "return_pending"
    RETURN_APPROVED = "return_approved"
    RETURN_REJECTED = "return_rejected"
    RETURN_COMPLETED = "return_completed"


ACTIVE_RETURN_STATUSES = (ReturnStatus.RETURN_PENDING, ReturnStatus.RETURN_APPROVED)


class ReturnRequest(Base):
    """
    ReturnRequest entity.

    booking_id carries no foreign key: return history outlives the booking
    it was raised against.
    """
    __tablename__ = "return_requests"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )

    booking_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    customer_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    return_reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[ReturnStatus] = mapped_column(
        SQLEnum(ReturnStatus, name="return_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ReturnStatus.RETURN_PENDING,
        index=True,
    )
    request_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Admin/processing details
    admin_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    refund_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)

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
        return f"<ReturnRequest(id={self.id}, booking_id={self.booking_id}, status={self.status})>"
