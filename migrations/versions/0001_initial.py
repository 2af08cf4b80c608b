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

SPLIT_METHODS = ("EQUAL", "PERCENTAGE", "UNEQUAL", "SHARES")
CATEGORIES = (
    "FOOD", "TRANSPORT", "SHOPPING", "ENTERTAINMENT", "HOME",
    "BILLS", "HEALTH", "TRAVEL", "EDUCATION", "OTHER",
)
ACTIVITY_TYPES = (
    "GROUP_CREATED", "MEMBER_ADDED", "MEMBER_REMOVED",
    "FRIEND_ADDED", "FRIEND_REMOVED", "EXPENSE_ADDED",
)


def upgrade() -> None:
    op.create_table(
        "groups",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("group_type", sa.String(50), nullable=False),
        sa.Column("created_by", sa.String(128), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("version_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "group_members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("member_id", sa.String(128), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("balance", sa.Numeric(12, 2), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("group_id", "member_id", name="uq_group_member"),
    )
    op.create_index("ix_group_members_group_id", "group_members", ["group_id"])
    op.create_index("ix_group_members_member_id", "group_members", ["member_id"])

    op.create_table(
        "friend_ledger_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.String(128), nullable=False),
        sa.Column("friend_id", sa.String(128), nullable=False),
        sa.Column("friend_name", sa.String(100), nullable=False),
        sa.Column("net_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("version_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("owner_id", "friend_id", name="uq_friend_entry"),
    )
    op.create_index("ix_friend_ledger_entries_owner_id", "friend_ledger_entries", ["owner_id"])

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_by_id", sa.String(128), nullable=False),
        sa.Column(
            "split_method",
            sa.Enum(*SPLIT_METHODS, name="split_method_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column(
            "category",
            sa.Enum(*CATEGORIES, name="expense_category_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column("expense_date", sa.Date(), nullable=False),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id")),
        sa.Column("friend_id", sa.String(128)),
        sa.Column("created_by", sa.String(128), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("(group_id IS NULL) <> (friend_id IS NULL)", name="ck_expense_single_context"),
        sa.CheckConstraint("amount > 0", name="ck_expense_amount_positive"),
    )
    op.create_index("ix_expenses_group_id", "expenses", ["group_id"])
    op.create_index("ix_expenses_friend_id", "expenses", ["friend_id"])

    op.create_table(
        "expense_splits",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("expense_id", sa.Integer(), sa.ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("member_id", sa.String(128), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("percentage", sa.Numeric(7, 2), nullable=False),
        sa.Column("shares", sa.Numeric(12, 4)),
    )
    op.create_index("ix_expense_splits_expense_id", "expense_splits", ["expense_id"])

    op.create_table(
        "transaction_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("expense_id", sa.Integer(), sa.ForeignKey("expenses.id"), nullable=False, unique=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id")),
        sa.Column("friend_pair", sa.String(257)),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_by", sa.String(128), nullable=False),
        sa.Column("split_with", sa.JSON(), nullable=False),
        sa.Column(
            "category",
            sa.Enum(*CATEGORIES, name="expense_category_enum", create_type=False),
            nullable=False,
        ),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_transaction_log_group_id", "transaction_log", ["group_id"])
    op.create_index("ix_transaction_log_friend_pair", "transaction_log", ["friend_pair"])

    op.create_table(
        "activity_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_type", sa.Enum(*ACTIVITY_TYPES, name="activity_type_enum"), nullable=False),
        sa.Column("actor_id", sa.String(128), nullable=False),
        sa.Column("target_id", sa.String(128), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_activity_log_actor_id", "activity_log", ["actor_id"])


def downgrade() -> None:
    op.drop_table("activity_log")
    op.drop_table("transaction_log")
    op.drop_table("expense_splits")
    op.drop_table("expenses")
    op.drop_table("friend_ledger_entries")
    op.drop_table("group_members")
    op.drop_table("groups")
    sa.Enum(name="activity_type_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="expense_category_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="split_method_enum").drop(op.get_bind(), checkfirst=True)
