"""Create rental origination tables

Revision ID: 20261019_000001
Revises: None
Create Date: 2026-10-19

Users, properties, leases, tenant profiles, OTP codes, payment
transactions, approval fees and the webhook audit log.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LEASE_STATUSES = (
    'draft', 'pending_signature', 'pending_landlord_approval',
    'approved', 'rejected', 'cancelled', 'active', 'completed',
)
PAYMENT_STATUSES = ('pending', 'processing', 'approved', 'declined', 'voided', 'error')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create the rental workflow tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('roles', sa.String(100), nullable=False, server_default='tenant'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'properties',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('owner_id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('property_type', sa.String(20), nullable=False, server_default='apartment'),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='COP'),
        sa.Column('address', sa.String(500), nullable=False),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('neighborhood', sa.String(100), nullable=True),
        sa.Column('bedrooms', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('bathrooms', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('area_sqm', sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column('is_furnished', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['owner_id'],
            ['users.id'],
            name='fk_properties_owner_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_properties_owner_id', 'properties', ['owner_id'])

    op.create_table(
        'leases',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('property_id', sa.String(36), nullable=False),
        sa.Column('tenant_id', sa.String(36), nullable=False),
        sa.Column('landlord_id', sa.String(36), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='COP'),
        sa.Column('deposit_amount', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column(
            'status',
            sa.Enum(*LEASE_STATUSES, name='lease_status', native_enum=False, create_constraint=True, length=32),
            nullable=False,
            server_default='draft'
        ),
        sa.Column('current_step', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('contract_content', sa.Text(), nullable=True),
        sa.Column('tenant_signed_at', sa.DateTime(), nullable=True),
        sa.Column('tenant_signature_hash', sa.String(64), nullable=True),
        sa.Column('landlord_responded_at', sa.DateTime(), nullable=True),
        sa.Column('landlord_notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['property_id'],
            ['properties.id'],
            name='fk_leases_property_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(['tenant_id'], ['users.id'], name='fk_leases_tenant_id', ondelete='NO ACTION'),
        sa.ForeignKeyConstraint(['landlord_id'], ['users.id'], name='fk_leases_landlord_id', ondelete='NO ACTION'),
        sa.CheckConstraint(
            "(status = 'draft' AND current_step IN (1, 2, 3))"
            " OR (status = 'pending_signature' AND current_step = 4)"
            " OR (status = 'pending_landlord_approval' AND current_step = 5)"
            " OR status NOT IN ('draft', 'pending_signature', 'pending_landlord_approval')",
            name='ck_leases_step_matches_status',
        ),
    )
    op.create_index('ix_leases_property_id', 'leases', ['property_id'])
    op.create_index('ix_leases_tenant_id', 'leases', ['tenant_id'])
    op.create_index('ix_leases_landlord_id', 'leases', ['landlord_id'])
    op.create_index('ix_leases_status', 'leases', ['status'])

    op.create_table(
        'tenant_profiles',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('document_type', sa.String(20), nullable=False),
        sa.Column('document_number', sa.String(50), nullable=False),
        sa.Column('occupation', sa.String(255), nullable=False),
        sa.Column('monthly_income', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('reference_name', sa.String(255), nullable=False),
        sa.Column('reference_phone', sa.String(50), nullable=False),
        sa.Column('reference_relation', sa.String(100), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', name='uq_tenant_profiles_user_id'),
        sa.ForeignKeyConstraint(
            ['user_id'],
            ['users.id'],
            name='fk_tenant_profiles_user_id',
            ondelete='CASCADE'
        ),
    )

    op.create_table(
        'otp_codes',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('lease_id', sa.String(36), nullable=False),
        sa.Column('code', sa.String(6), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('used_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_otp_codes_user_id', ondelete='NO ACTION'),
        sa.ForeignKeyConstraint(['lease_id'], ['leases.id'], name='fk_otp_codes_lease_id', ondelete='CASCADE'),
    )
    op.create_index('ix_otp_codes_lease_user', 'otp_codes', ['lease_id', 'user_id'])

    op.create_table(
        'payment_transactions',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('reference', sa.String(255), nullable=False),
        sa.Column('provider_transaction_id', sa.String(255), nullable=True),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='COP'),
        sa.Column(
            'status',
            sa.Enum(*PAYMENT_STATUSES, name='payment_status', native_enum=False, create_constraint=True, length=20),
            nullable=False,
            server_default='pending'
        ),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('integrity_signature', sa.String(64), nullable=False),
        sa.Column('checkout_url', sa.String(1000), nullable=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('lease_id', sa.String(36), nullable=True),
        sa.Column('purpose', sa.String(50), nullable=False, server_default='approval_fee'),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('voided_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_payment_transactions_user_id'),
        sa.ForeignKeyConstraint(['lease_id'], ['leases.id'], name='fk_payment_transactions_lease_id'),
    )
    op.create_index('ix_payment_transactions_reference', 'payment_transactions', ['reference'], unique=True)
    op.create_index(
        'ix_payment_transactions_provider_transaction_id',
        'payment_transactions',
        ['provider_transaction_id']
    )
    op.create_index('ix_payment_transactions_status', 'payment_transactions', ['status'])
    op.create_index('ix_payment_transactions_lease_id', 'payment_transactions', ['lease_id'])

    op.create_table(
        'lease_approval_fees',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('lease_id', sa.String(36), nullable=False),
        sa.Column('payment_transaction_id', sa.String(36), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('fee_percentage', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('fee_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('is_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lease_id', name='uq_lease_approval_fees_lease_id'),
        sa.ForeignKeyConstraint(
            ['lease_id'],
            ['leases.id'],
            name='fk_lease_approval_fees_lease_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['payment_transaction_id'],
            ['payment_transactions.id'],
            name='fk_lease_approval_fees_payment_transaction_id',
            ondelete='NO ACTION'
        ),
    )
    op.create_index(
        'ix_lease_approval_fees_payment_transaction_id',
        'lease_approval_fees',
        ['payment_transaction_id']
    )

    # Append-only webhook audit log
    op.create_table(
        'webhook_events',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('event_type', sa.String(100), nullable=False),
        sa.Column('provider_transaction_id', sa.String(255), nullable=True),
        sa.Column('reference', sa.String(255), nullable=True),
        sa.Column('payload', sa.Text(), nullable=False),
        sa.Column('received_checksum', sa.String(128), nullable=True),
        sa.Column('calculated_checksum', sa.String(64), nullable=False),
        sa.Column('is_valid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('processed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('payment_transaction_id', sa.String(36), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['payment_transaction_id'],
            ['payment_transactions.id'],
            name='fk_webhook_events_payment_transaction_id',
        ),
    )
    op.create_index('ix_webhook_events_provider_transaction_id', 'webhook_events', ['provider_transaction_id'])
    op.create_index('ix_webhook_events_reference', 'webhook_events', ['reference'])


def downgrade() -> None:
    """Drop the rental workflow tables."""
    op.drop_index('ix_webhook_events_reference', table_name='webhook_events')
    op.drop_index('ix_webhook_events_provider_transaction_id', table_name='webhook_events')
    op.drop_table('webhook_events')

    op.drop_index('ix_lease_approval_fees_payment_transaction_id', table_name='lease_approval_fees')
    op.drop_table('lease_approval_fees')

    op.drop_index('ix_payment_transactions_lease_id', table_name='payment_transactions')
    op.drop_index('ix_payment_transactions_status', table_name='payment_transactions')
    op.drop_index('ix_payment_transactions_provider_transaction_id', table_name='payment_transactions')
    op.drop_index('ix_payment_transactions_reference', table_name='payment_transactions')
    op.drop_table('payment_transactions')

    op.drop_index('ix_otp_codes_lease_user', table_name='otp_codes')
    op.drop_table('otp_codes')

    op.drop_table('tenant_profiles')

    op.drop_index('ix_leases_status', table_name='leases')
    op.drop_index('ix_leases_landlord_id', table_name='leases')
    op.drop_index('ix_leases_tenant_id', table_name='leases')
    op.drop_index('ix_leases_property_id', table_name='leases')
    op.drop_table('leases')

    op.drop_index('ix_properties_owner_id', table_name='properties')
    op.drop_table('properties')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
