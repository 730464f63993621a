"""Interaction Dispatch — explicit routing from a decoded button token to a roster operation.

Invariants:
    - Every ActionKind -> handler mapping is visible in one dict; no string matching elsewhere
    - Malformed tokens raise MalformedTokenError before any store access
    - Author and conflict outcomes become control panels (not errors): the author gets a Close
      button, a participant repeating their status gets a Cancel button
    - Withdrawal notices are emitted only when the actor was previously joined
    - Store, timeout and not-found errors propagate to the caller

Design Decisions:
    - Returns an InteractionOutcome value; the platform adapter decides how to render it
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable

from rosterbot.core.domain_types import ChannelId, MessageId, UserId
from rosterbot.core.errors import (
    AuthorCannotActError, ParticipantConflictError,
)
from rosterbot.core.format_messages import (
    AUTHOR_PANEL_TEXT, PARTICIPANT_PANEL_TEXT, ROSTER_CLOSED_TEXT,
    CANCEL_LABEL, CLOSE_LABEL, JOIN_LABEL, DECLINE_LABEL,
    format_join_message, format_withdrawal_message,
)
from rosterbot.core.interaction_action import ActionKind, InteractionAction
from rosterbot.core.roster_state import RosterView, StatusChange
from rosterbot.services.roster_service import RosterService

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    UPDATED = "updated"
    AUTHOR_PANEL = "author_panel"
    PARTICIPANT_PANEL = "participant_panel"
    CLOSED = "closed"


@dataclass(frozen=True)
class Button:
    label: str
    custom_id: str


@dataclass(frozen=True)
class InteractionOutcome:
    """What the adapter should show after a button press."""
    kind: OutcomeKind
    view: RosterView | None = None
    follow_up: str | None = None
    panel_text: str | None = None
    buttons: list[Button] = field(default_factory=list)


def roster_buttons() -> list[Button]:
    """Join/decline buttons attached to every roster post."""
    return [
        Button(JOIN_LABEL, InteractionAction(ActionKind.JOIN).to_custom_id()),
        Button(DECLINE_LABEL, InteractionAction(ActionKind.DECLINE).to_custom_id()),
    ]


class InteractionDispatch:
    """Routes ActionKind -> handler. Explicit registration, no auto-discovery."""

    def __init__(self, service: RosterService):
        self._service = service
        self._handlers: dict[
            ActionKind,
            Callable[[ChannelId, MessageId, UserId], Awaitable[InteractionOutcome]],
        ] = {
            ActionKind.JOIN: self._join,
            ActionKind.DECLINE: self._decline,
            ActionKind.CANCEL: self._cancel,
            ActionKind.CLOSE: self._close,
        }

    async def execute(
        self,
        custom_id: str,
        channel_id: ChannelId,
        clicked_message_id: MessageId,
        actor_id: UserId,
    ) -> InteractionOutcome:
        """Decode custom_id and run the matching roster operation."""
        action = InteractionAction.from_custom_id(custom_id)
        message_id = action.resolve_message_id(clicked_message_id)
        logger.info(
            f"User {actor_id} pressed {action.kind.value}",
            extra={
                "action": action.kind.value, "channel_id": channel_id,
                "message_id": message_id, "actor_id": actor_id,
            },
        )
        handler = self._handlers[action.kind]
        try:
            return await handler(channel_id, message_id, actor_id)
        except AuthorCannotActError:
            return _author_panel(message_id)
        except ParticipantConflictError:
            return _participant_panel(message_id)

    async def _join(
        self, channel_id: ChannelId, message_id: MessageId, actor_id: UserId,
    ) -> InteractionOutcome:
        change = await self._service.join(channel_id, message_id, actor_id)
        return InteractionOutcome(
            OutcomeKind.UPDATED, view=change.view,
            follow_up=format_join_message(actor_id, change.view),
        )

    async def _decline(
        self, channel_id: ChannelId, message_id: MessageId, actor_id: UserId,
    ) -> InteractionOutcome:
        change = await self._service.decline(channel_id, message_id, actor_id)
        return _withdrawal_outcome(change, actor_id)

    async def _cancel(
        self, channel_id: ChannelId, message_id: MessageId, actor_id: UserId,
    ) -> InteractionOutcome:
        change = await self._service.cancel(channel_id, message_id, actor_id)
        return _withdrawal_outcome(change, actor_id)

    async def _close(
        self, channel_id: ChannelId, message_id: MessageId, actor_id: UserId,
    ) -> InteractionOutcome:
        await self._service.close(channel_id, message_id, actor_id)
        return InteractionOutcome(OutcomeKind.CLOSED, follow_up=ROSTER_CLOSED_TEXT)


def _withdrawal_outcome(change: StatusChange, actor_id: UserId) -> InteractionOutcome:
    follow_up = (
        format_withdrawal_message(actor_id, change.view) if change.was_joined else None
    )
    return InteractionOutcome(OutcomeKind.UPDATED, view=change.view, follow_up=follow_up)


def _author_panel(message_id: MessageId) -> InteractionOutcome:
    close = InteractionAction(ActionKind.CLOSE, message_id).to_custom_id()
    return InteractionOutcome(
        OutcomeKind.AUTHOR_PANEL, panel_text=AUTHOR_PANEL_TEXT,
        buttons=[Button(CLOSE_LABEL, close)],
    )


def _participant_panel(message_id: MessageId) -> InteractionOutcome:
    cancel = InteractionAction(ActionKind.CANCEL, message_id).to_custom_id()
    return InteractionOutcome(
        OutcomeKind.PARTICIPANT_PANEL, panel_text=PARTICIPANT_PANEL_TEXT,
        buttons=[Button(CANCEL_LABEL, cancel)],
    )
