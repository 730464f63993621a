"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Platform identifiers (guild, channel, message, user) are opaque strings
    - RosterId is the store-assigned integer key
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: values are the exact strings stored in the status columns
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

RosterId = NewType("RosterId", int)
GuildId = NewType("GuildId", str)
ChannelId = NewType("ChannelId", str)
MessageId = NewType("MessageId", str)
UserId = NewType("UserId", str)


# ─── Enums ───────────────────────────────────────────────────────

class RosterStatus(str, Enum):
    """Roster lifecycle — closed is transient, the row is deleted right after."""
    OPENED = "opened"
    CLOSED = "closed"


class ParticipantStatus(str, Enum):
    """A user's current relationship to a roster. No terminal state."""
    JOINED = "joined"
    DECLINED = "declined"
    CANCELED = "canceled"
