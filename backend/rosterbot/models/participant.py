"""Participant ORM — a user's current relationship to a roster.

Invariants:
    - Composite primary key (roster_id, user_id): at most one row per user per roster
    - status is "joined", "declined" or "canceled" (ParticipantStatus)
    - created_at is set once; status changes only touch status and updated_at
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rosterbot.db.base import Base


class ParticipantRow(Base):
    __tablename__ = "participants"

    roster_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rosters.id", ondelete="CASCADE"),
        primary_key=True, index=True,
    )
    user_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    roster: Mapped["RosterRow"] = relationship(
        "RosterRow", back_populates="participants",
    )
