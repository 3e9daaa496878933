"""Create payment_record table.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_CANONICAL_STATUSES = ("succeeded", "refunded", "canceled", "failed", "pending")
_TRANSACTION_TYPES = ("payment", "refund", "void", "authorization")


def upgrade() -> None:
    op.create_table(
        "payment_record",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("uid", sa.String(length=64), nullable=False),
        sa.Column(
            "canonical_status",
            sa.Enum(
                *_CANONICAL_STATUSES,
                name="canonical_status",
                native_enum=False,
                create_constraint=True,
                length=32,
            ),
            nullable=False,
        ),
        sa.Column(
            "transaction_type",
            sa.Enum(
                *_TRANSACTION_TYPES,
                name="transaction_type",
                native_enum=False,
                create_constraint=True,
                length=32,
            ),
            nullable=False,
        ),
        sa.Column("amount", sa.String(length=32), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("customer_email", sa.String(), nullable=True),
        sa.Column("card_brand", sa.String(length=32), nullable=True),
        sa.Column("card_last4", sa.String(length=4), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("order_id", sa.Uuid(), nullable=True),
        sa.Column("customer_id", sa.Uuid(), nullable=True),
        sa.Column("origin", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_payment_record")),
        sa.UniqueConstraint("uid", name=op.f("uq_payment_record_uid")),
    )
    op.create_index("ix_payment_record_paid_at", "payment_record", ["paid_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_payment_record_paid_at", table_name="payment_record")
    op.drop_table("payment_record")
