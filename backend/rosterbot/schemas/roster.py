"""Roster Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - Platform identifiers are non-empty, at most 32 chars, stripped
    - RosterOpen.max_capacity >= 1
    - custom_id is at most 100 chars (the opaque-handle ceiling)
    - RosterViewResponse carries the rendered post text (title, description,
      newline-separated joined/declined mentions) next to the raw lists
"""

from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from rosterbot.core.custom_id import MAX_CUSTOM_ID_LENGTH
from rosterbot.core.format_messages import (
    format_roster_title, format_roster_description, format_user_list,
)
from rosterbot.core.roster_state import RosterView
from rosterbot.services.interaction_dispatch import InteractionOutcome, roster_buttons

PlatformId = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=32),
]


class RosterOpen(BaseModel):
    """Open a roster on an already-posted message."""
    guild_id: PlatformId
    channel_id: PlatformId
    message_id: PlatformId
    author_id: PlatformId
    max_capacity: int = Field(ge=1, le=10_000)


class InteractionRequest(BaseModel):
    """A button press relayed by the platform adapter."""
    custom_id: str = Field(min_length=1, max_length=MAX_CUSTOM_ID_LENGTH)
    channel_id: PlatformId
    message_id: PlatformId
    actor_id: PlatformId


class ButtonResponse(BaseModel):
    label: str
    custom_id: str


class RosterViewResponse(BaseModel):
    id: int
    guild_id: str
    channel_id: str
    message_id: str
    author_id: str
    max_capacity: int
    status: str
    joined_users: list[str]
    declined_users: list[str]
    remaining_slots: int
    is_full: bool
    extra_count: int
    title: str
    description: str
    joined_text: str
    declined_text: str
    buttons: list[ButtonResponse]

    @classmethod
    def from_view(cls, view: RosterView) -> "RosterViewResponse":
        roster = view.roster
        return cls(
            id=roster.id,
            guild_id=roster.guild_id,
            channel_id=roster.channel_id,
            message_id=roster.message_id,
            author_id=roster.author_id,
            max_capacity=roster.max_capacity,
            status=roster.status.value,
            joined_users=list(view.joined_users),
            declined_users=list(view.declined_users),
            remaining_slots=view.remaining_slots,
            is_full=view.is_full,
            extra_count=view.extra_count,
            title=format_roster_title(view),
            description=format_roster_description(view),
            joined_text=format_user_list(view.joined_users),
            declined_text=format_user_list(view.declined_users),
            buttons=[
                ButtonResponse(label=b.label, custom_id=b.custom_id)
                for b in roster_buttons()
            ],
        )


class InteractionResponse(BaseModel):
    kind: str
    roster: RosterViewResponse | None = None
    follow_up: str | None = None
    panel_text: str | None = None
    buttons: list[ButtonResponse] = []

    @classmethod
    def from_outcome(cls, outcome: InteractionOutcome) -> "InteractionResponse":
        return cls(
            kind=outcome.kind.value,
            roster=(
                RosterViewResponse.from_view(outcome.view)
                if outcome.view is not None else None
            ),
            follow_up=outcome.follow_up,
            panel_text=outcome.panel_text,
            buttons=[
                ButtonResponse(label=b.label, custom_id=b.custom_id)
                for b in outcome.buttons
            ],
        )
