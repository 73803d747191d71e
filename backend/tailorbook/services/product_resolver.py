"""Product reference resolution.

Bookings only need to know that a catalog product exists and what it looked
like at booking time. ``ProductResolver`` is the seam; the catalog itself is
owned elsewhere. ``CatalogProductResolver`` reads the shared
``catalog_products`` table.
"""
from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from tailorbook.models.catalog import CatalogProduct, ProductType
from tailorbook.services.errors import ProductNotFound


@dataclass(frozen=True)
class ProductSnapshot:
    """Title/image copied into a booking at creation time."""
    title: str
    image_url: Optional[str]


class ProductResolver(Protocol):
    def resolve(self, product_type: ProductType, product_id: UUID) -> ProductSnapshot:
        """Return the product snapshot or raise ProductNotFound."""
        ...


class CatalogProductResolver:
    """Resolves products from the catalog table of the same database."""

    def __init__(self, session: Session):
        self.session = session

    def resolve(self, product_type: ProductType, product_id: UUID) -> ProductSnapshot:
        stmt = select(CatalogProduct).where(
            CatalogProduct.id == product_id,
            CatalogProduct.product_type == product_type,
            CatalogProduct.active.is_(True),
        )
        product = self.session.execute(stmt).scalar_one_or_none()
        if product is None:
            raise ProductNotFound(product_type.value, product_id)
        return ProductSnapshot(title=product.title, image_url=product.image_url)
