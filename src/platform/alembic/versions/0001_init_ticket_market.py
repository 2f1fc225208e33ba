"""init_ticket_market

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Schema:
- event / ticket_class: catalog; ticket_class.remaining is the inventory counter
- ticket: one row per held or sold ticket
- resale_listing: at most one open listing per ticket (partial unique index)
- payment_order: gateway orders with their recorded outcome
- audit_entry: append-only ticket history
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""

    # ========== Catalog ==========
    op.create_table(
        'event',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ends_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('hold_window_minutes', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'ticket_class',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('class_type', sa.String(length=20), nullable=False),
        sa.Column('total_supply', sa.Integer(), nullable=False),
        sa.Column('remaining', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.ForeignKeyConstraint(['event_id'], ['event.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'class_type', name='uq_ticket_class_event_type'),
        sa.CheckConstraint(
            'remaining >= 0 AND remaining <= total_supply', name='ck_ticket_class_remaining'
        ),
    )
    op.create_index('ix_ticket_class_event_id', 'ticket_class', ['event_id'])

    # ========== Tickets ==========
    op.create_table(
        'ticket',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('ticket_class_id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('hold_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('payment_state', sa.String(length=20), nullable=False),
        sa.Column('external_order_ref', sa.String(length=64), nullable=True),
        sa.Column('qr_token', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['ticket_class_id'], ['ticket_class.id']),
        sa.ForeignKeyConstraint(['event_id'], ['event.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('qr_token'),
    )
    op.create_index('ix_ticket_ticket_class_id', 'ticket', ['ticket_class_id'])
    op.create_index('ix_ticket_owner_id', 'ticket', ['owner_id'])
    op.create_index(
        'ix_ticket_owner_class_status', 'ticket', ['owner_id', 'ticket_class_id', 'status']
    )
    op.create_index('ix_ticket_status_hold_expires_at', 'ticket', ['status', 'hold_expires_at'])

    # ========== Resale ==========
    op.create_table(
        'resale_listing',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('ticket_id', sa.Uuid(), nullable=False),
        sa.Column('seller_id', sa.Integer(), nullable=False),
        sa.Column('ask_price', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('buyer_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['ticket_id'], ['ticket.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_resale_listing_ticket_id', 'resale_listing', ['ticket_id'])
    op.create_index('ix_resale_listing_seller_id', 'resale_listing', ['seller_id'])
    op.create_index(
        'uq_resale_listing_open_ticket',
        'resale_listing',
        ['ticket_id'],
        unique=True,
        postgresql_where=sa.text("status = 'open'"),
        sqlite_where=sa.text("status = 'open'"),
    )

    # ========== Payments ==========
    op.create_table(
        'payment_order',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('subject_kind', sa.String(length=10), nullable=False),
        sa.Column('ticket_id', sa.Uuid(), nullable=False),
        sa.Column('listing_id', sa.Uuid(), nullable=True),
        sa.Column('payer_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('external_order_id', sa.String(length=64), nullable=False),
        sa.Column('external_payment_id', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('outcome', sa.String(length=20), nullable=True),
        sa.Column('refund_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['ticket_id'], ['ticket.id']),
        sa.ForeignKeyConstraint(['listing_id'], ['resale_listing.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('external_order_id'),
    )
    op.create_index('ix_payment_order_payer_id', 'payment_order', ['payer_id'])
    op.create_index('ix_payment_order_ticket_status', 'payment_order', ['ticket_id', 'status'])

    # ========== Audit ==========
    op.create_table(
        'audit_entry',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('ticket_id', sa.Uuid(), nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=20), nullable=False),
        sa.Column('external_payment_id', sa.String(length=64), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['ticket_id'], ['ticket.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_entry_ticket_id', 'audit_entry', ['ticket_id'])


def downgrade() -> None:
    op.drop_table('audit_entry')
    op.drop_table('payment_order')
    op.drop_table('resale_listing')
    op.drop_table('ticket')
    op.drop_table('ticket_class')
    op.drop_table('event')
