"""
Catalog model - garments that can be booked for tailoring.
"""
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4
import enum

from sqlalchemy import String, Numeric, Boolean, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from tailorbook.lib.db import Base


class ProductType(str, enum.Enum):
    """Catalog category tags accepted on bookings."""
    MEN_KURTA = "MenKurta"
    MEN_SUIT = "MenSuit"
    MEN_SHIRT = "MenShirt"
    WOMEN_BLOUSE = "WomenBlouse"
    WOMEN_SAREE = "WomenSaree"
    WOMEN_LEHENGA = "WomenLehenga"
    WOMEN_SALWAR = "WomenSalwar"


class CatalogProduct(Base):
    """
    Catalog entry. One table for every category, tagged by product_type.
    """
    __tablename__ = "catalog_products"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )

    product_type: Mapped[ProductType] = mapped_column(
        SQLEnum(ProductType, name="product_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<CatalogProduct(id={self.id}, type={self.product_type}, title={self.title})>"
