"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "groups",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("code", sa.Text(), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "participants",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("group_id", sa.BigInteger(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.CheckConstraint("length(btrim(name)) > 0", name="participants_name_not_blank"),
    )

    op.create_table(
        "expenses",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("group_id", sa.BigInteger(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "payer_id",
            sa.BigInteger(),
            sa.ForeignKey("participants.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("description", sa.Text(), nullable=False, server_default="Expense"),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("amount > 0", name="expenses_amount_positive"),
    )

    op.create_table(
        "expense_participants",
        sa.Column(
            "expense_id",
            sa.BigInteger(),
            sa.ForeignKey("expenses.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "participant_id",
            sa.BigInteger(),
            sa.ForeignKey("participants.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_index("idx_groups_code", "groups", ["code"], unique=True)
    op.create_index(
        "uq_participants_group_name",
        "participants",
        ["group_id", sa.text("lower(name)")],
        unique=True,
    )
    op.create_index("idx_expenses_group", "expenses", ["group_id"])
    op.create_index("idx_expenses_payer", "expenses", ["payer_id"])
    op.create_index("idx_expense_participants_participant", "expense_participants", ["participant_id"])


def downgrade() -> None:
    op.drop_index("idx_expense_participants_participant", table_name="expense_participants")
    op.drop_index("idx_expenses_payer", table_name="expenses")
    op.drop_index("idx_expenses_group", table_name="expenses")
    op.drop_index("uq_participants_group_name", table_name="participants")
    op.drop_index("idx_groups_code", table_name="groups")

    op.drop_table("expense_participants")
    op.drop_table("expenses")
    op.drop_table("participants")
    op.drop_table("groups")
