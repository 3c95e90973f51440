"""initial shift swap schema

Revision ID: 3c1f2a9d7e40
Revises:
Create Date: 2026-10-19 09:12:31.402118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1f2a9d7e40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MEMBER_ROLE_ENUM = "member_role"
SHIFT_STATUS_ENUM = "shift_status"
SWAP_ACTION_ENUM = "swap_action"


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("join_code", sa.String(length=8), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_organizations_join_code"), "organizations", ["join_code"], unique=True)

    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.Enum("manager", "staff", name=MEMBER_ROLE_ENUM), nullable=False),
        sa.Column("staff_title", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("org_id", "email", name="uq_member_org_email"),
    )
    op.create_index(op.f("ix_members_org_id"), "members", ["org_id"], unique=False)
    op.create_index(op.f("ix_members_email"), "members", ["email"], unique=False)
    op.create_index(op.f("ix_members_role"), "members", ["role"], unique=False)

    op.create_table(
        "org_roles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("org_id", "name", name="uq_orgrole_org_name"),
    )
    op.create_index(op.f("ix_org_roles_org_id"), "org_roles", ["org_id"], unique=False)

    op.create_table(
        "member_org_roles",
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("org_role_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["org_role_id"], ["org_roles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("member_id", "org_role_id"),
    )
    op.create_index(op.f("ix_member_org_roles_org_role_id"), "member_org_roles", ["org_role_id"], unique=False)

    op.create_table(
        "shifts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("posted", "claimed", "approved", "declined", "cancelled", name=SHIFT_STATUS_ENUM),
            nullable=False,
        ),
        sa.Column("version", sa.Integer(), server_default="0", nullable=False),
        sa.Column("original_owner_id", sa.Integer(), nullable=False),
        sa.Column("posted_by_id", sa.Integer(), nullable=False),
        sa.Column("claimed_by_id", sa.Integer(), nullable=True),
        sa.Column("required_role_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("declined_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status != 'claimed' OR claimed_by_id IS NOT NULL", name="ck_shift_claimed_has_claimant"),
        sa.CheckConstraint("status != 'posted' OR claimed_by_id IS NULL", name="ck_shift_posted_unclaimed"),
        sa.CheckConstraint("version >= 0", name="ck_shift_version_non_negative"),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["original_owner_id"], ["members.id"]),
        sa.ForeignKeyConstraint(["posted_by_id"], ["members.id"]),
        sa.ForeignKeyConstraint(["claimed_by_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shifts_org_id"), "shifts", ["org_id"], unique=False)
    op.create_index(op.f("ix_shifts_original_owner_id"), "shifts", ["original_owner_id"], unique=False)
    op.create_index(op.f("ix_shifts_claimed_by_id"), "shifts", ["claimed_by_id"], unique=False)
    op.create_index("ix_shifts_org_date", "shifts", ["org_id", "date"], unique=False)
    op.create_index("ix_shifts_org_status", "shifts", ["org_id", "status"], unique=False)

    op.create_table(
        "shift_swap_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shift_id", sa.Integer(), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=False),
        sa.Column(
            "action",
            sa.Enum("posted", "claimed", "approved", "declined", "cancelled", name=SWAP_ACTION_ENUM),
            nullable=False,
        ),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["shift_id"], ["shifts.id"]),
        sa.ForeignKeyConstraint(["actor_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shift_swap_logs_shift_id"), "shift_swap_logs", ["shift_id"], unique=False)
    op.create_index(op.f("ix_shift_swap_logs_actor_id"), "shift_swap_logs", ["actor_id"], unique=False)
    op.create_index("ix_swap_logs_shift_created", "shift_swap_logs", ["shift_id", "created_at"], unique=False)

    op.create_table(
        "push_subscriptions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("endpoint", sa.Text(), nullable=False),
        sa.Column("p256dh", sa.String(length=255), nullable=False),
        sa.Column("auth", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("endpoint"),
    )
    op.create_index(op.f("ix_push_subscriptions_member_id"), "push_subscriptions", ["member_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_push_subscriptions_member_id"), table_name="push_subscriptions")
    op.drop_table("push_subscriptions")
    op.drop_index("ix_swap_logs_shift_created", table_name="shift_swap_logs")
    op.drop_index(op.f("ix_shift_swap_logs_actor_id"), table_name="shift_swap_logs")
    op.drop_index(op.f("ix_shift_swap_logs_shift_id"), table_name="shift_swap_logs")
    op.drop_table("shift_swap_logs")
    op.drop_index("ix_shifts_org_status", table_name="shifts")
    op.drop_index("ix_shifts_org_date", table_name="shifts")
    op.drop_index(op.f("ix_shifts_claimed_by_id"), table_name="shifts")
    op.drop_index(op.f("ix_shifts_original_owner_id"), table_name="shifts")
    op.drop_index(op.f("ix_shifts_org_id"), table_name="shifts")
    op.drop_table("shifts")
    op.drop_index(op.f("ix_member_org_roles_org_role_id"), table_name="member_org_roles")
    op.drop_table("member_org_roles")
    op.drop_index(op.f("ix_org_roles_org_id"), table_name="org_roles")
    op.drop_table("org_roles")
    op.drop_index(op.f("ix_members_role"), table_name="members")
    op.drop_index(op.f("ix_members_email"), table_name="members")
    op.drop_index(op.f("ix_members_org_id"), table_name="members")
    op.drop_table("members")
    op.drop_index(op.f("ix_organizations_join_code"), table_name="organizations")
    op.drop_table("organizations")
    for enum_name in (SWAP_ACTION_ENUM, SHIFT_STATUS_ENUM, MEMBER_ROLE_ENUM):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
