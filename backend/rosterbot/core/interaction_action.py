"""Interaction Actions — tagged variant for button callbacks, encoded via the custom ID codec.

Invariants:
    - Every button token carries an "action" key whose value is an ActionKind
    - Roster-post buttons (join/decline) carry no message id: the clicked message is the roster
    - Control-panel buttons (cancel/close) carry the roster message id under "message"
    - Unknown or missing actions raise MalformedTokenError

Design Decisions:
    - Explicit Enum over string matching: dispatch enumerates ActionKind, nothing else
"""

from dataclasses import dataclass
from enum import Enum

from rosterbot.core.custom_id import decode_custom_id, encode_custom_id
from rosterbot.core.domain_types import MessageId
from rosterbot.core.errors import MalformedTokenError

ACTION_KEY = "action"
MESSAGE_KEY = "message"


class ActionKind(str, Enum):
    JOIN = "roster/join"
    DECLINE = "roster/decline"
    CANCEL = "roster/cancel"
    CLOSE = "roster/close"


@dataclass(frozen=True)
class InteractionAction:
    """One decoded button callback."""
    kind: ActionKind
    message_id: MessageId | None = None

    def to_custom_id(self) -> str:
        items = {ACTION_KEY: self.kind.value}
        if self.message_id is not None:
            items[MESSAGE_KEY] = self.message_id
        return encode_custom_id(items)

    @classmethod
    def from_custom_id(cls, token: str) -> "InteractionAction":
        items = decode_custom_id(token)
        raw_kind = items.get(ACTION_KEY)
        if raw_kind is None:
            raise MalformedTokenError("missing action")
        try:
            kind = ActionKind(raw_kind)
        except ValueError:
            raise MalformedTokenError(f"unknown action {raw_kind!r}") from None
        message_id = items.get(MESSAGE_KEY)
        return cls(kind, MessageId(message_id) if message_id is not None else None)

    def resolve_message_id(self, clicked_message_id: MessageId) -> MessageId:
        """Roster message this action targets."""
        return self.message_id if self.message_id is not None else clicked_message_id
