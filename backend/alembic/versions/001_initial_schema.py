"""Initial schema — rosters and participants.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "rosters",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("guild_id", sa.String(32), nullable=False),
        sa.Column("channel_id", sa.String(32), nullable=False),
        sa.Column("message_id", sa.String(32), nullable=False),
        sa.Column("author_id", sa.String(32), nullable=False),
        sa.Column("max_capacity", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="opened"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("channel_id", "message_id", name="uq_rosters_location"),
    )
    op.create_index("ix_rosters_status", "rosters", ["status"])
    op.create_index("ix_rosters_guild_id", "rosters", ["guild_id"])

    op.create_table(
        "participants",
        sa.Column(
            "roster_id", sa.Integer,
            sa.ForeignKey("rosters.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("user_id", sa.String(32), primary_key=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_participants_roster_id", "participants", ["roster_id"])


def downgrade() -> None:
    op.drop_index("ix_participants_roster_id", table_name="participants")
    op.drop_table("participants")
    op.drop_index("ix_rosters_guild_id", table_name="rosters")
    op.drop_index("ix_rosters_status", table_name="rosters")
    op.drop_table("rosters")
