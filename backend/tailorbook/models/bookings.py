"""
Booking model - tailoring orders placed by customers against catalog products.
"""
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4
import enum

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from tailorbook.lib.db import Base
from tailorbook.models.catalog import ProductType


class BookingStatus(str, enum.Enum):
    """
    Booking status state machine.

    pending → confirmed → completed → delivered, pending → rejected,
    delivered → return_pending → return_approved → return_completed,
    return_pending → return_rejected.
    """
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    RETURN_PENDING = "return_pending"
    RETURN_APPROVED = "return_approved"
    RETURN_REJECTED = "return_rejected"
    RETURN_COMPLETED = "return_completed"


class Booking(Base):
    """
    Booking entity.

    product_title/product_image are a snapshot taken at creation and are not
    refreshed when the catalog changes. ``version`` is bumped on every UPDATE
    and checked by the mapper, so racing writers fail instead of clobbering.
    """
    __tablename__ = "bookings"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )

    customer_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Product snapshot
    product_type: Mapped[ProductType] = mapped_column(
        SQLEnum(ProductType, name="product_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    product_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    product_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    product_image: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    # Contact
    contact_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[BookingStatus] = mapped_column(
        SQLEnum(BookingStatus, name="booking_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    admin_message: Mapped[str] = mapped_column(Text, nullable=False, default="")

    version: Mapped[int] = mapped_column(Integer, nullable=False)

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

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, status={self.status}, customer_id={self.customer_id})>"
