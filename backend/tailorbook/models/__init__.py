"""
SQLAlchemy models package.
Import all models here to ensure they're registered with Base.metadata.
"""
from tailorbook.models.users import User, UserRole
from tailorbook.models.catalog import CatalogProduct, ProductType
from tailorbook.models.bookings import Booking, BookingStatus
from tailorbook.models.return_requests import ReturnRequest, ReturnStatus
from tailorbook.models.consultations import (
    Consultation,
    ConsultationServiceType,
    ConsultationStatus,
)

__all__ = [
    "User",
    "UserRole",
    "CatalogProduct",
    "ProductType",
    "Booking",
    "BookingStatus",
    "ReturnRequest",
    "ReturnStatus",
    "Consultation",
    "ConsultationServiceType",
    "ConsultationStatus",
]
