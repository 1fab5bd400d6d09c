"""create scheduling tables

Revision ID: 5b2f0c9d7a31
Revises:
Create Date: 2026-10-19 09:12:44.512031

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5b2f0c9d7a31'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    ]


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Tenants
    op.create_table(
        'businesses',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(100), nullable=True, unique=True),
        sa.Column('timezone', sa.String(50), server_default='UTC'),
        sa.Column('buffer_before', sa.Integer, nullable=False, server_default='0'),
        sa.Column('buffer_after', sa.Integer, nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        *_timestamps()
    )

    # 2. Staff
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('business_id', sa.Uuid(as_uuid=True), sa.ForeignKey('businesses.id'), nullable=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('username', sa.String(100), nullable=True, unique=True),
        sa.Column('role', sa.Enum('OWNER', 'STAFF', name='staffrole'), nullable=False, server_default='STAFF'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)
    )
    op.create_index('ix_users_business_id', 'users', ['business_id'])
    op.create_index('ix_users_email', 'users', ['email'])

    # 3. Bookable units
    op.create_table(
        'services',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('business_id', sa.Uuid(as_uuid=True), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=True),
        sa.Column('duration', sa.Integer, nullable=False, server_default='30'),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        *_timestamps()
    )
    op.create_index('ix_services_business_id', 'services', ['business_id'])
    op.create_index('ix_services_is_active', 'services', ['is_active'])

    op.create_table(
        'event_types',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('business_id', sa.Uuid(as_uuid=True), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('creator_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('service_id', sa.Uuid(as_uuid=True), sa.ForeignKey('services.id'), nullable=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('color', sa.String(20), server_default='#3788d8'),
        sa.Column('duration', sa.Integer, nullable=False),
        sa.Column('buffer_before', sa.Integer, nullable=False, server_default='0'),
        sa.Column('buffer_after', sa.Integer, nullable=False, server_default='0'),
        sa.Column('minimum_notice', sa.Integer, nullable=False, server_default='0'),
        sa.Column('requires_confirmation', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('creator_id', 'slug', name='uq_event_types_creator_slug')
    )
    op.create_index('ix_event_types_business_id', 'event_types', ['business_id'])

    # 4. Weekly schedule (user_id NULL = business default)
    op.create_table(
        'working_hours',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('business_id', sa.Uuid(as_uuid=True), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True),
        sa.Column('day_of_week', sa.Integer, nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('end_time', sa.String(5), nullable=False),
        sa.Column('is_enabled', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.UniqueConstraint('business_id', 'user_id', 'day_of_week', name='uq_working_hours_owner_day')
    )
    op.create_index('ix_working_hours_business_id', 'working_hours', ['business_id'])
    op.create_index('ix_working_hours_user_id', 'working_hours', ['user_id'])

    # 5. Customers
    op.create_table(
        'customers',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('business_id', sa.Uuid(as_uuid=True), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('business_id', 'email', name='uq_customers_business_email')
    )
    op.create_index('ix_customers_business_id', 'customers', ['business_id'])

    # 6. Appointments
    op.create_table(
        'appointments',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('business_id', sa.Uuid(as_uuid=True), sa.ForeignKey('businesses.id'), nullable=False),
        sa.Column('staff_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('service_id', sa.Uuid(as_uuid=True), sa.ForeignKey('services.id'), nullable=True),
        sa.Column('event_type_id', sa.Uuid(as_uuid=True), sa.ForeignKey('event_types.id'), nullable=True),
        sa.Column('customer_id', sa.Uuid(as_uuid=True), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('start_time', sa.DateTime, nullable=False),
        sa.Column('end_time', sa.DateTime, nullable=False),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED', name='appointmentstatus'),
            nullable=False,
            server_default='PENDING'
        ),
        sa.Column('notes', sa.Text, nullable=True),
        *_timestamps(),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True)
    )
    op.create_index('ix_appointments_business_id', 'appointments', ['business_id'])
    op.create_index('ix_appointments_staff_start', 'appointments', ['staff_id', 'start_time'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_appointments_staff_start', table_name='appointments')
    op.drop_index('ix_appointments_business_id', table_name='appointments')
    op.drop_table('appointments')

    op.drop_index('ix_customers_business_id', table_name='customers')
    op.drop_table('customers')

    op.drop_index('ix_working_hours_user_id', table_name='working_hours')
    op.drop_index('ix_working_hours_business_id', table_name='working_hours')
    op.drop_table('working_hours')

    op.drop_index('ix_event_types_business_id', table_name='event_types')
    op.drop_table('event_types')

    op.drop_index('ix_services_is_active', table_name='services')
    op.drop_index('ix_services_business_id', table_name='services')
    op.drop_table('services')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_business_id', table_name='users')
    op.drop_table('users')

    op.drop_table('businesses')

    sa.Enum(name='appointmentstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='staffrole').drop(op.get_bind(), checkfirst=True)
