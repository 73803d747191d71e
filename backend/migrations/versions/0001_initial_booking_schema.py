"""initial booking schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


PRODUCT_TYPES = ('MenKurta', 'MenSuit', 'MenShirt', 'WomenBlouse', 'WomenSaree', 'WomenLehenga', 'WomenSalwar')
BOOKING_STATUSES = (
    'pending', 'confirmed', 'rejected', 'completed', 'delivered',
    'return_pending', 'return_approved', 'return_rejected', 'return_completed',
)
RETURN_STATUSES = ('return_pending', 'return_approved', 'return_rejected', 'return_completed')
CONSULTATION_SERVICE_TYPES = (
    'Remote Call (Phone/Video)', 'Doorstep Visit (Tailor comes to you)', 'In-Studio Appointment',
)
CONSULTATION_STATUSES = ('PENDING_CONFIRMATION', 'CONFIRMED', 'COMPLETED', 'CANCELLED', 'RESCHEDULED')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    product_type = sa.Enum(*PRODUCT_TYPES, name='product_type')
    # Already created with catalog_products on PostgreSQL
    existing_product_type = sa.Enum(*PRODUCT_TYPES, name='product_type').with_variant(
        postgresql.ENUM(*PRODUCT_TYPES, name='product_type', create_type=False), 'postgresql'
    )

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('role', sa.Enum('customer', 'admin', name='user_role'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'catalog_products',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('product_type', product_type, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('image_url', sa.String(length=1000), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_catalog_products_product_type', 'catalog_products', ['product_type'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_type', existing_product_type, nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('product_title', sa.String(length=255), nullable=True),
        sa.Column('product_image', sa.String(length=1000), nullable=True),
        sa.Column('contact_name', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=20), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum(*BOOKING_STATUSES, name='booking_status'), nullable=False),
        sa.Column('admin_message', sa.Text(), nullable=False, server_default=''),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
    )
    op.create_index('ix_bookings_customer_id', 'bookings', ['customer_id'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])

    # No FK on booking_id: return rows outlive their booking
    op.create_table(
        'return_requests',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('booking_id', sa.Uuid(), nullable=False),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('return_reason', sa.Text(), nullable=False),
        sa.Column('status', sa.Enum(*RETURN_STATUSES, name='return_status'), nullable=False),
        sa.Column('request_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('refund_amount', sa.Numeric(10, 2), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_return_requests_booking_id', 'return_requests', ['booking_id'])
    op.create_index('ix_return_requests_customer_id', 'return_requests', ['customer_id'])
    op.create_index('ix_return_requests_status', 'return_requests', ['status'])

    op.create_table(
        'consultations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('client_name', sa.String(length=255), nullable=False),
        sa.Column('client_email', sa.String(length=255), nullable=False),
        sa.Column('client_phone', sa.String(length=20), nullable=False),
        sa.Column(
            'service_type',
            sa.Enum(*CONSULTATION_SERVICE_TYPES, name='consultation_service_type'),
            nullable=False,
        ),
        sa.Column('preferred_date', sa.Date(), nullable=False),
        sa.Column('preferred_time', sa.String(length=50), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('occasion', sa.String(length=255), nullable=False),
        sa.Column('style_archetype', sa.String(length=255), nullable=False),
        sa.Column('body_shape', sa.String(length=100), nullable=True),
        sa.Column('comfort_preference', sa.String(length=255), nullable=True),
        sa.Column('inspiration_link', sa.String(length=1000), nullable=True),
        sa.Column('notes', sa.String(length=500), nullable=True),
        sa.Column('status', sa.Enum(*CONSULTATION_STATUSES, name='consultation_status'), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_consultations_client_email', 'consultations', ['client_email'])
    op.create_index('ix_consultations_status', 'consultations', ['status'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('consultations')
    op.drop_table('return_requests')
    op.drop_table('bookings')
    op.drop_table('catalog_products')
    op.drop_table('users')
    for enum_name in (
        'consultation_status', 'consultation_service_type', 'return_status',
        'booking_status', 'product_type', 'user_role',
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
