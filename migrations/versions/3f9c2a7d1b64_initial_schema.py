"""Initial schema: users, causes, sponsorships, claims, waitlist, otp, settings

Revision ID: 3f9c2a7d1b64
Revises:
Create Date: 2026-10-12 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f9c2a7d1b64'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=True),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_email'), ['email'], unique=True)

    op.create_table(
        'settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('settings', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_settings_key'), ['key'], unique=True)

    op.create_table(
        'causes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('location', sa.String(length=200), nullable=True),
        sa.Column('target_amount', sa.Float(), nullable=False),
        sa.Column('current_amount', sa.Float(), nullable=False),
        sa.Column('creator_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('is_online', sa.Boolean(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('distribution_start_date', sa.Date(), nullable=True),
        sa.Column('distribution_end_date', sa.Date(), nullable=True),
        sa.Column('waitlist_seq', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('causes', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_causes_category'), ['category'], unique=False)
        batch_op.create_index(batch_op.f('ix_causes_creator_id'), ['creator_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_causes_status'), ['status'], unique=False)

    op.create_table(
        'sponsorships',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sponsor_id', sa.Integer(), nullable=True),
        sa.Column('cause_id', sa.Integer(), nullable=False),
        sa.Column('organization_name', sa.String(length=200), nullable=False),
        sa.Column('contact_name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('tote_quantity', sa.Integer(), nullable=False),
        sa.Column('number_of_totes', sa.Integer(), nullable=True),
        sa.Column('unit_price', sa.Float(), nullable=False),
        sa.Column('total_amount', sa.Float(), nullable=False),
        sa.Column('logo_url', sa.String(length=500), nullable=False),
        sa.Column('mockup_url', sa.String(length=500), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('distribution_type', sa.String(length=20), nullable=False),
        sa.Column('selected_cities', sa.JSON(), nullable=True),
        sa.Column('distribution_start_date', sa.Date(), nullable=False),
        sa.Column('distribution_end_date', sa.Date(), nullable=False),
        sa.Column('distribution_locations', sa.JSON(), nullable=True),
        sa.Column('demographics', sa.JSON(), nullable=True),
        sa.Column('logo_position', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('approved_by_id', sa.Integer(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('is_online', sa.Boolean(), nullable=True),
        sa.Column('ended_at', sa.DateTime(), nullable=True),
        sa.Column('ended_by_id', sa.Integer(), nullable=True),
        sa.Column('payment_id', sa.String(length=64), nullable=True),
        sa.Column('payment_status', sa.String(length=20), nullable=True),
        sa.Column('payment_order_id', sa.String(length=64), nullable=True),
        sa.Column('payment_amount', sa.Integer(), nullable=True),
        sa.Column('payment_currency', sa.String(length=8), nullable=True),
        sa.Column('payment_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['approved_by_id'], ['users.id']),
        sa.ForeignKeyConstraint(['cause_id'], ['causes.id']),
        sa.ForeignKeyConstraint(['ended_by_id'], ['users.id']),
        sa.ForeignKeyConstraint(['sponsor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('sponsorships', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_sponsorships_cause_id'), ['cause_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_sponsorships_created_at'), ['created_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_sponsorships_email'), ['email'], unique=False)
        batch_op.create_index(batch_op.f('ix_sponsorships_organization_name'), ['organization_name'], unique=False)
        batch_op.create_index(batch_op.f('ix_sponsorships_payment_order_id'), ['payment_order_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_sponsorships_sponsor_id'), ['sponsor_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_sponsorships_status'), ['status'], unique=False)

    op.create_table(
        'claims',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cause_id', sa.Integer(), nullable=False),
        sa.Column('cause_title', sa.String(length=200), nullable=True),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('purpose', sa.Text(), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('state', sa.String(length=100), nullable=True),
        sa.Column('zip_code', sa.String(length=20), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('email_verified', sa.Boolean(), nullable=False),
        sa.Column('source', sa.String(length=20), nullable=False),
        sa.Column('referrer_url', sa.String(length=500), nullable=True),
        sa.Column('qr_code_scanned', sa.Boolean(), nullable=False),
        sa.Column('shipping_date', sa.DateTime(), nullable=True),
        sa.Column('delivery_date', sa.DateTime(), nullable=True),
        sa.Column('tracking_number', sa.String(length=100), nullable=True),
        sa.Column('carrier', sa.String(length=100), nullable=True),
        sa.Column('estimated_delivery', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['cause_id'], ['causes.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('cause_id', 'email', name='uq_claims_cause_email'),
    )
    with op.batch_alter_table('claims', schema=None) as batch_op:
        batch_op.create_index('idx_claims_created_at', ['created_at'], unique=False)
        batch_op.create_index('idx_claims_email', ['email'], unique=False)
        batch_op.create_index('idx_claims_source', ['source'], unique=False)
        batch_op.create_index('idx_claims_status', ['status'], unique=False)

    op.create_table(
        'waitlist_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cause_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('notify_email', sa.Boolean(), nullable=False),
        sa.Column('notify_sms', sa.Boolean(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('magic_link_token', sa.String(length=64), nullable=True),
        sa.Column('magic_link_sent_at', sa.DateTime(), nullable=True),
        sa.Column('magic_link_expires', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['cause_id'], ['causes.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('cause_id', 'email', name='uq_waitlist_cause_email'),
        sa.UniqueConstraint('cause_id', 'position', name='uq_waitlist_cause_position'),
        sa.UniqueConstraint('magic_link_token'),
    )
    with op.batch_alter_table('waitlist_entries', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_waitlist_entries_email'), ['email'], unique=False)
        batch_op.create_index(batch_op.f('ix_waitlist_entries_status'), ['status'], unique=False)

    op.create_table(
        'otp_verifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('otp_hash', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('verified', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('otp_verifications', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_otp_verifications_phone'), ['phone'], unique=False)


def downgrade():
    with op.batch_alter_table('otp_verifications', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_otp_verifications_phone'))
    op.drop_table('otp_verifications')

    with op.batch_alter_table('waitlist_entries', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_waitlist_entries_status'))
        batch_op.drop_index(batch_op.f('ix_waitlist_entries_email'))
    op.drop_table('waitlist_entries')

    with op.batch_alter_table('claims', schema=None) as batch_op:
        batch_op.drop_index('idx_claims_status')
        batch_op.drop_index('idx_claims_source')
        batch_op.drop_index('idx_claims_email')
        batch_op.drop_index('idx_claims_created_at')
    op.drop_table('claims')

    with op.batch_alter_table('sponsorships', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_sponsorships_status'))
        batch_op.drop_index(batch_op.f('ix_sponsorships_sponsor_id'))
        batch_op.drop_index(batch_op.f('ix_sponsorships_payment_order_id'))
        batch_op.drop_index(batch_op.f('ix_sponsorships_organization_name'))
        batch_op.drop_index(batch_op.f('ix_sponsorships_email'))
        batch_op.drop_index(batch_op.f('ix_sponsorships_created_at'))
        batch_op.drop_index(batch_op.f('ix_sponsorships_cause_id'))
    op.drop_table('sponsorships')

    with op.batch_alter_table('causes', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_causes_status'))
        batch_op.drop_index(batch_op.f('ix_causes_creator_id'))
        batch_op.drop_index(batch_op.f('ix_causes_category'))
    op.drop_table('causes')

    with op.batch_alter_table('settings', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_settings_key'))
    op.drop_table('settings')

    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_users_email'))
    op.drop_table('users')
