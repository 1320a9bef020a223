"""Create the slot table."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261017_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "slot",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("slot_status", sa.String(length=16), nullable=False, server_default="empty"),
        sa.Column("draft_status", sa.String(length=32), nullable=False, server_default="none"),
        sa.Column("draft_name_en", sa.String(length=256)),
        sa.Column("draft_name_fr", sa.String(length=256)),
        sa.Column("draft_price", sa.BigInteger()),
        sa.Column("draft_currency", sa.String(length=3)),
        sa.Column("draft_seller_contact", sa.String(length=64)),
        sa.Column("draft_image_urls", sa.JSON()),
        sa.Column("draft_updated_at", sa.DateTime(timezone=True)),
        sa.Column("live_name_en", sa.String(length=256)),
        sa.Column("live_name_fr", sa.String(length=256)),
        sa.Column("live_price", sa.BigInteger()),
        sa.Column("live_currency", sa.String(length=3)),
        sa.Column("live_seller_contact", sa.String(length=64)),
        sa.Column("live_image_urls", sa.JSON()),
        sa.Column("live_start_time", sa.DateTime(timezone=True)),
        sa.Column("live_end_time", sa.DateTime(timezone=True)),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint(
            "slot_status IN ('empty', 'live', 'maintenance')",
            name="ck_slot_slot_status",
        ),
        sa.CheckConstraint(
            "draft_status IN ('none', 'drafting', 'ready_to_publish', 'rejected')",
            name="ck_slot_draft_status",
        ),
    )
    op.create_index("ix_slot_slot_status", "slot", ["slot_status"])


def downgrade() -> None:
    op.drop_index("ix_slot_slot_status", table_name="slot")
    op.drop_table("slot")
