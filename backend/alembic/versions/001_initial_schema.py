"""Initial schema — competitions, rounds, entries, promotion_stickers, sticker_usages.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "competitions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("media_type", sa.String(20), nullable=False, server_default="BOTH"),
        sa.Column("max_duration_seconds", sa.Integer, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "rounds",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("competition_id", UUID(as_uuid=True), sa.ForeignKey("competitions.id"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("likes_to_pass", sa.Integer, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("start_date <= end_date", name="ck_rounds_window"),
    )

    op.create_table(
        "entries",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("round_id", UUID(as_uuid=True), sa.ForeignKey("rounds.id"), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("post_id", sa.String(64), nullable=True),
        sa.Column("media_url", sa.String(2000), nullable=True),
        sa.Column("visible_in_competition_feed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("visible_in_normal_feed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    # One live entry per (round, user); unlinked slots are exempt
    op.create_index(
        "uq_entries_live_round_user", "entries", ["round_id", "user_id"],
        unique=True,
        postgresql_where=sa.text("post_id IS NOT NULL"),
        sqlite_where=sa.text("post_id IS NOT NULL"),
    )
    op.create_index("ix_entries_round_user", "entries", ["round_id", "user_id"])
    op.create_index("ix_entries_post_id", "entries", ["post_id"])

    op.create_table(
        "promotion_stickers",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("competition_id", UUID(as_uuid=True), sa.ForeignKey("competitions.id"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False, server_default=""),
        sa.Column("image_url", sa.String(2000), nullable=False),
        sa.Column("position", sa.String(20), nullable=False, server_default="BOTTOM_RIGHT"),
        sa.Column("usage_limit", sa.Integer, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("allocation_version", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("usage_limit IS NULL OR usage_limit >= 0", name="ck_promotion_stickers_limit"),
    )

    op.create_table(
        "sticker_usages",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("sticker_id", UUID(as_uuid=True), sa.ForeignKey("promotion_stickers.id"), nullable=False),
        sa.Column("media_url", sa.String(2000), nullable=False),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_sticker_usages_sticker_live", "sticker_usages", ["sticker_id", "is_deleted"])
    op.create_index("ix_sticker_usages_media_url", "sticker_usages", ["media_url"])


def downgrade() -> None:
    op.drop_index("ix_sticker_usages_media_url", table_name="sticker_usages")
    op.drop_index("ix_sticker_usages_sticker_live", table_name="sticker_usages")
    op.drop_table("sticker_usages")
    op.drop_table("promotion_stickers")
    op.drop_index("ix_entries_post_id", table_name="entries")
    op.drop_index("ix_entries_round_user", table_name="entries")
    op.drop_index("uq_entries_live_round_user", table_name="entries")
    op.drop_table("entries")
    op.drop_table("rounds")
    op.drop_table("competitions")
