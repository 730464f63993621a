"""Roster Message Formatting — pure functions producing chat-markup text.

Invariants:
    - All functions are pure (no IO, no DB)
    - Output is plain chat markup (mentions, bold); embeds belong to the platform adapter
    - Join announcement shows remaining slots while not full, the closing roll call exactly
      when the roster fills, and nothing extra once it overflows
"""

from rosterbot.core.domain_types import UserId
from rosterbot.core.roster_state import RosterView

JOIN_LABEL = "🙋 Join"
DECLINE_LABEL = "🙅 Decline"
CANCEL_LABEL = "❌ Cancel"
CLOSE_LABEL = "🗑️ Delete"

AUTHOR_PANEL_TEXT = (
    "The author cannot join or decline.\n"
    "Press the button to delete this roster."
)
PARTICIPANT_PANEL_TEXT = (
    "You have already joined or declined.\n"
    "Press the button to cancel."
)
ROSTER_CLOSED_TEXT = "This roster has been deleted."


def format_mention(user_id: str) -> str:
    return f"<@{user_id}>"


def format_bold(text: str) -> str:
    return f"**{text}**"


def format_user_list(user_ids: list[UserId], separator: str = "\n") -> str:
    return separator.join(format_mention(u) for u in user_ids)


def format_roster_title(view: RosterView) -> str:
    return f"📢 Recruiting @{view.roster.max_capacity}"


def format_roster_description(view: RosterView) -> str:
    return f"{format_mention(view.roster.author_id)} started recruiting"


def format_join_message(actor_id: UserId, view: RosterView) -> str:
    """Announcement posted as a reply when someone joins."""
    base = f"{format_mention(actor_id)} joined."
    if not view.is_full:
        return f"{base} @{view.remaining_slots}"
    if view.extra_count == 0:
        roll_call = format_user_list(view.joined_users, separator=" ")
        return f"{base}\n\n{format_bold('[Recruitment closed]')}\n{roll_call}"
    return base


def format_withdrawal_message(actor_id: UserId, view: RosterView) -> str:
    """Posted when a previously joined user declines or cancels."""
    return f"{format_mention(actor_id)} withdrew. @{view.remaining_slots}"
