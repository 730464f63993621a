"""Roster ORM — persists the recruitment aggregate bound to one rendered message.

Invariants:
    - id is an autoincrement integer primary key
    - (channel_id, message_id) is unique: one roster per rendered message
    - status is "opened" or "closed" (RosterStatus)
    - Deleting a roster deletes its participants (FK ON DELETE CASCADE)
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rosterbot.db.base import Base


class RosterRow(Base):
    """Roster entity — capacity-bounded recruitment."""
    __tablename__ = "rosters"
    __table_args__ = (
        UniqueConstraint("channel_id", "message_id", name="uq_rosters_location"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    channel_id: Mapped[str] = mapped_column(String(32), nullable=False)
    message_id: Mapped[str] = mapped_column(String(32), nullable=False)
    author_id: Mapped[str] = mapped_column(String(32), nullable=False)
    max_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="opened", index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    participants: Mapped[list["ParticipantRow"]] = relationship(
        "ParticipantRow", back_populates="roster",
        cascade="all, delete-orphan", passive_deletes=True,
    )
