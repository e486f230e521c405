"""Create dealers, branches and dealer_bills

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

bill_number is globally unique; status is derived from pending (Completed iff 0).
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None

bill_status = sa.Enum("Pending", "Completed", name="bill_status")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "dealers",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("dealer_name", sa.String(length=255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_dealers_id", "dealers", ["id"])
    op.create_index("ix_dealers_dealer_name", "dealers", ["dealer_name"])

    op.create_table(
        "branches",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_branches_id", "branches", ["id"])
    op.create_index("ix_branches_name", "branches", ["name"])

    op.create_table(
        "dealer_bills",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("dealer_id", UUID(as_uuid=True), sa.ForeignKey("dealers.id"), nullable=False),
        sa.Column("branch_id", UUID(as_uuid=True), sa.ForeignKey("branches.id"), nullable=False),
        sa.Column("bill_number", sa.String(length=100), nullable=False),
        sa.Column("bill_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("pending", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", bill_status, nullable=False),
        sa.Column("bill_image", sa.String(length=500), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_dealer_bills_id", "dealer_bills", ["id"])
    op.create_index("ix_dealer_bills_dealer_id", "dealer_bills", ["dealer_id"])
    op.create_index("ix_dealer_bills_branch_id", "dealer_bills", ["branch_id"])
    op.create_index("ix_dealer_bills_status", "dealer_bills", ["status"])
    op.create_index("ix_dealer_bills_bill_number", "dealer_bills", ["bill_number"], unique=True)


def downgrade() -> None:
    op.drop_table("dealer_bills")
    op.drop_table("branches")
    op.drop_table("dealers")
    bill_status.drop(op.get_bind(), checkfirst=True)
