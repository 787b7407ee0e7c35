"""create booking tables

Revision ID: 4c1d7a2f9b30
Revises:
Create Date: 2026-10-19 10:12:41.532207

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '4c1d7a2f9b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # gist index over (uuid =, tsrange &&) needs btree_gist
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist;")

    # 1. Services
    op.create_table(
        'services',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('provider_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=True),
        sa.Column('duration', sa.Integer, nullable=False, server_default='30'),
        sa.Column('buffer_before', sa.Integer, nullable=False, server_default='0'),
        sa.Column('buffer_after', sa.Integer, nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('duration > 0', name='ck_services_duration_positive'),
        sa.CheckConstraint('buffer_before >= 0 AND buffer_after >= 0', name='ck_services_buffers_non_negative'),
    )
    op.create_index('ix_services_provider_id', 'services', ['provider_id'])
    op.create_index('ix_services_active', 'services', ['active'])

    # 2. Staff and customers
    op.create_table(
        'staff',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('provider_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String, nullable=True),
        sa.Column('active', sa.Boolean, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_staff_provider_id', 'staff', ['provider_id'])

    op.create_table(
        'customers',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(200), nullable=True),
        sa.Column('email', sa.String, nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )

    # 3. Weekly availability (0=Sunday) and blocked dates
    op.create_table(
        'availability',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('staff_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('staff.id', ondelete='CASCADE'), nullable=False),
        sa.Column('provider_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('day_of_week', sa.Integer, nullable=False),
        sa.Column('start_time', sa.Time, nullable=False),
        sa.Column('end_time', sa.Time, nullable=False),
        sa.Column('is_available', sa.Boolean, server_default=sa.text('true')),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_availability_day_of_week'),
    )
    op.create_index('ix_availability_staff_id', 'availability', ['staff_id'])

    op.create_table(
        'blocked_dates',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('staff_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('staff.id', ondelete='CASCADE'), nullable=False),
        sa.Column('provider_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=False),
        sa.Column('reason', sa.String, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('end_date >= start_date', name='ck_blocked_dates_range'),
    )
    op.create_index('ix_blocked_dates_staff_id', 'blocked_dates', ['staff_id'])

    # 4. Appointments
    op.create_table(
        'appointments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('service_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('services.id'), nullable=False),
        sa.Column('staff_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('staff.id'), nullable=False),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('appointment_date', sa.Date, nullable=False),
        sa.Column('start_time', sa.Time, nullable=False),
        sa.Column('end_time', sa.Time, nullable=False),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('booked_price', sa.Numeric(10, 2), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_appointments_service_id', 'appointments', ['service_id'])
    op.create_index('ix_appointments_staff_id', 'appointments', ['staff_id'])
    op.create_index('ix_appointments_appointment_date', 'appointments', ['appointment_date'])

    # 5. No two active appointments of one staff member may overlap.
    # Inserts that violate it fail with SQLSTATE 23P01.
    op.execute("""
        ALTER TABLE appointments
        ADD CONSTRAINT no_overlapping_appointments
        EXCLUDE USING gist (
            staff_id WITH =,
            tsrange(appointment_date + start_time, appointment_date + end_time) WITH &&
        )
        WHERE (status IN ('confirmed', 'pending'));
    """)


def downgrade() -> None:
    """Downgrade schema."""

    op.execute("ALTER TABLE appointments DROP CONSTRAINT IF EXISTS no_overlapping_appointments;")

    # Drop tables in reverse order (due to foreign keys)
    op.drop_index('ix_appointments_appointment_date', 'appointments')
    op.drop_index('ix_appointments_staff_id', 'appointments')
    op.drop_index('ix_appointments_service_id', 'appointments')
    op.drop_table('appointments')

    op.drop_index('ix_blocked_dates_staff_id', 'blocked_dates')
    op.drop_table('blocked_dates')

    op.drop_index('ix_availability_staff_id', 'availability')
    op.drop_table('availability')

    op.drop_table('customers')

    op.drop_index('ix_staff_provider_id', 'staff')
    op.drop_table('staff')

    op.drop_index('ix_services_active', 'services')
    op.drop_index('ix_services_provider_id', 'services')
    op.drop_table('services')
