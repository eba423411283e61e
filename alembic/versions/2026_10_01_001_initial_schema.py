"""Initial schema: cities, users, events and the webhook log

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-01

"""
from alembic import op
import sqlalchemy as sa
import sqlmodel

# revision identifiers
revision = '001_initial_schema'
down_revision = None


subscription_tier = sa.Enum('STARTER', 'PRO', 'PREMIER', name='subscriptiontier')
user_role = sa.Enum('ADMIN', 'EVENT_CREATOR', 'VISITOR', name='userrole')
event_status = sa.Enum('DRAFT', 'PENDING', 'APPROVED', 'REJECTED', 'FLAGGED', name='eventstatus')


def upgrade():
    op.create_table(
        'cities',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sqlmodel.AutoString(length=255), nullable=False),
        sa.Column('slug', sqlmodel.AutoString(length=255), nullable=False),
        sa.Column('domain', sqlmodel.AutoString(length=255), nullable=False),
        sa.Column('branding', sa.JSON(), nullable=False),
        sa.Column('subscription_tier', subscription_tier, nullable=False),
        sa.Column('stripe_customer_id', sqlmodel.AutoString(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_cities_name', 'cities', ['name'], unique=True)
    op.create_index('ix_cities_slug', 'cities', ['slug'], unique=True)
    op.create_index('ix_cities_domain', 'cities', ['domain'], unique=True)
    op.create_index('ix_cities_stripe_customer_id', 'cities', ['stripe_customer_id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('city_id', sa.Uuid(), sa.ForeignKey('cities.id'), nullable=False),
        sa.Column('email', sqlmodel.AutoString(length=255), nullable=False),
        sa.Column('password_hash', sqlmodel.AutoString(), nullable=False),
        sa.Column('name', sqlmodel.AutoString(length=255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_city_id', 'users', ['city_id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'events',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('city_id', sa.Uuid(), sa.ForeignKey('cities.id'), nullable=False),
        sa.Column('creator_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sqlmodel.AutoString(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sqlmodel.AutoString(length=100), nullable=False),
        sa.Column('external_link', sqlmodel.AutoString(length=2048), nullable=True),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('recurrence', sa.JSON(), nullable=True),
        sa.Column('location', sa.JSON(), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('status', event_status, nullable=False),
        sa.Column('flag_reason', sa.Text(), nullable=True),
        sa.Column('flagged_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_events_city_id', 'events', ['city_id'])
    op.create_index('ix_events_creator_id', 'events', ['creator_id'])
    op.create_index('ix_events_category', 'events', ['category'])
    op.create_index('ix_events_start_time', 'events', ['start_time'])
    op.create_index('ix_events_status', 'events', ['status'])
    op.create_index('ix_events_created_at', 'events', ['created_at'])

    op.create_table(
        'webhook_events',
        sa.Column('id', sqlmodel.AutoString(length=255), primary_key=True),
        sa.Column('event_type', sqlmodel.AutoString(length=100), nullable=False),
        sa.Column('processed_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_webhook_events_event_type', 'webhook_events', ['event_type'])
    op.create_index('ix_webhook_events_processed_at', 'webhook_events', ['processed_at'])


def downgrade():
    op.drop_table('webhook_events')
    op.drop_table('events')
    op.drop_table('users')
    op.drop_table('cities')

    bind = op.get_bind()
    event_status.drop(bind, checkfirst=True)
    user_role.drop(bind, checkfirst=True)
    subscription_tier.drop(bind, checkfirst=True)
