"""
Seed a local database with an admin, a customer and a small catalog,
then print bearer tokens for trying the booking API by hand.

Usage:
    python run_demo_setup.py
"""
from decimal import Decimal

from sqlalchemy import select

from tailorbook.lib.db import get_db_context, init_db
from tailorbook.lib.jwt import create_access_token
from tailorbook.models import CatalogProduct, ProductType, User, UserRole


DEMO_USERS = [
    {"name": "Demo Admin", "email": "admin@tailorbook.local", "phone": None, "role": UserRole.ADMIN},
    {"name": "Asha Verma", "email": "asha@tailorbook.local", "phone": "+919800000001", "role": UserRole.CUSTOMER},
]

DEMO_PRODUCTS = [
    (ProductType.MEN_KURTA, "Linen Festive Kurta", Decimal("2499.00")),
    (ProductType.MEN_SUIT, "Two-piece Wool Suit", Decimal("14999.00")),
    (ProductType.WOMEN_BLOUSE, "Silk Boat-neck Blouse", Decimal("1899.00")),
    (ProductType.WOMEN_LEHENGA, "Bridal Lehenga", Decimal("45999.00")),
]


def _get_or_create_user(db, name, email, phone, role) -> User:
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        user = User(name=name, email=email, phone=phone, role=role)
        db.add(user)
        db.flush()
    return user


def setup_demo():
    init_db()

    with get_db_context() as db:
        users = [_get_or_create_user(db, **fields) for fields in DEMO_USERS]

        existing = db.execute(select(CatalogProduct)).scalars().all()
        if not existing:
            for product_type, title, price in DEMO_PRODUCTS:
                db.add(CatalogProduct(product_type=product_type, title=title, price=price))
            db.flush()
        products = db.execute(select(CatalogProduct)).scalars().all()

        print("Users:")
        for user in users:
            token = create_access_token(str(user.id), user.role.value)
            print(f"  {user.role.value:<9} {user.email}")
            print(f"    Authorization: Bearer {token}")

        print()
        print("Catalog:")
        for product in products:
            print(f"  {product.product_type.value:<13} {product.id}  {product.title}")


if __name__ == "__main__":
    setup_demo()
