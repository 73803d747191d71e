"""
Shared fixtures.

Tests run against an in-memory SQLite database: DATABASE_URL is pointed at
``sqlite://`` before any application module is imported, and every test
gets freshly created tables.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-enough-bytes-for-hs256")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from tailorbook.lib.db import SessionLocal, drop_db, init_db
from tailorbook.lib.jwt import create_access_token
from tailorbook.lib.metrics import get_metrics_collector, reset_metrics
from tailorbook.models import CatalogProduct, ProductType, User, UserRole
from tailorbook.services.actor import Actor
from tailorbook.services.booking_lifecycle import BookingLifecycleService


@pytest.fixture
def db_session():
    """Session on a clean schema; tables are dropped afterwards."""
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        drop_db()
        reset_metrics()


def _make_user(session, name, email, role, phone=None) -> User:
    user = User(name=name, email=email, phone=phone, role=role)
    session.add(user)
    session.commit()
    return user


@pytest.fixture
def customer(db_session) -> User:
    return _make_user(db_session, "Asha Verma", "asha@example.com", UserRole.CUSTOMER, phone="+919800000001")


@pytest.fixture
def other_customer(db_session) -> User:
    return _make_user(db_session, "Ravi Kumar", "ravi@example.com", UserRole.CUSTOMER)


@pytest.fixture
def admin(db_session) -> User:
    return _make_user(db_session, "Shop Admin", "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def customer_actor(customer) -> Actor:
    return Actor.customer(customer.id)


@pytest.fixture
def other_customer_actor(other_customer) -> Actor:
    return Actor.customer(other_customer.id)


@pytest.fixture
def admin_actor(admin) -> Actor:
    return Actor.admin(admin.id)


@pytest.fixture
def product(db_session) -> CatalogProduct:
    item = CatalogProduct(
        product_type=ProductType.MEN_KURTA,
        title="Linen Festive Kurta",
        image_url="https://cdn.example.com/kurta.jpg",
        price=Decimal("2499.00"),
    )
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture
def metrics():
    return get_metrics_collector()


@pytest.fixture
def service(db_session, metrics) -> BookingLifecycleService:
    return BookingLifecycleService(db_session, metrics=metrics)


@pytest.fixture
def make_booking(service, customer_actor, admin_actor, product):
    """Create a booking and walk it along the happy path up to ``status``."""
    path = ["confirmed", "completed", "delivered"]

    def _make(status: str = "pending", actor: Actor = None):
        booking = service.create_booking(
            actor or customer_actor,
            product_type=product.product_type.value,
            product_id=product.id,
            notes="Chest 40, sleeves 25",
        )
        if status == "rejected":
            return service.admin_transition(admin_actor, booking.id, "rejected")
        if status == "pending":
            return booking
        for step in path[: path.index(status) + 1]:
            booking = service.admin_transition(admin_actor, booking.id, step)
        return booking

    return _make


@pytest.fixture
def client(db_session):
    """Test client for FastAPI app (tables created by db_session)."""
    from tailorbook.api.app import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user."""
    def _headers(user: User) -> dict:
        token = create_access_token(str(user.id), user.role.value)
        return {"Authorization": f"Bearer {token}"}

    return _headers
