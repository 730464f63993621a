"""Roster State — aggregate records and the derived view projection.

Invariants:
    - RosterState and Participant mirror the rosters/participants rows, no ORM coupling
    - RosterView is rebuilt from the authoritative participant list after every mutation
    - joined_users/declined_users keep participant creation order; canceled users appear in neither
    - The author is a joined participant, so capacity arithmetic offsets by one:
        remaining_slots = max(capacity - joined + 1, 0)
        is_full         = capacity <= joined - 1
        extra_count     = max(joined - capacity - 1, 0)

Design Decisions:
    - build_view is a pure function: the engine feeds it rows, tests feed it literals
"""

from dataclasses import dataclass, field
from datetime import datetime

from rosterbot.core.domain_types import (
    RosterId, GuildId, ChannelId, MessageId, UserId,
    RosterStatus, ParticipantStatus,
)


@dataclass
class RosterState:
    """Roster aggregate root. id is 0 until the store assigns one."""
    guild_id: GuildId
    channel_id: ChannelId
    message_id: MessageId
    author_id: UserId
    max_capacity: int
    created_at: datetime
    status: RosterStatus = RosterStatus.OPENED
    id: RosterId = RosterId(0)
    updated_at: datetime | None = None


@dataclass
class Participant:
    roster_id: RosterId
    user_id: UserId
    status: ParticipantStatus
    created_at: datetime
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RosterView:
    """Read model: roster snapshot plus ordered joined/declined user lists."""
    roster: RosterState
    joined_users: list[UserId] = field(default_factory=list)
    declined_users: list[UserId] = field(default_factory=list)

    @property
    def remaining_slots(self) -> int:
        return max(self.roster.max_capacity - len(self.joined_users) + 1, 0)

    @property
    def is_full(self) -> bool:
        return self.roster.max_capacity <= len(self.joined_users) - 1

    @property
    def extra_count(self) -> int:
        return max(len(self.joined_users) - self.roster.max_capacity - 1, 0)


@dataclass(frozen=True)
class StatusChange:
    """Result of join/decline/cancel: the fresh view and the actor's prior status."""
    view: RosterView
    previous_status: ParticipantStatus | None

    @property
    def was_joined(self) -> bool:
        return self.previous_status == ParticipantStatus.JOINED


def build_view(roster: RosterState, participants: list[Participant]) -> RosterView:
    """Project participants (creation order) into a RosterView."""
    joined = [p.user_id for p in participants if p.status == ParticipantStatus.JOINED]
    declined = [p.user_id for p in participants if p.status == ParticipantStatus.DECLINED]
    return RosterView(roster=roster, joined_users=joined, declined_users=declined)
