"""Roster Message Formatting — tests for announcement text.

Tests cover:
    - Mentions and bold markup
    - Join message: remaining slots / closing roll call / plain overflow
    - Withdrawal notice carries remaining slots
"""

from datetime import datetime, timezone

from rosterbot.core.domain_types import (
    RosterId, GuildId, ChannelId, MessageId, UserId,
)
from rosterbot.core.format_messages import (
    format_mention, format_bold, format_user_list, format_roster_title,
    format_roster_description, format_join_message, format_withdrawal_message,
)
from rosterbot.core.roster_state import RosterState, RosterView


def _view(capacity: int, joined: list[str]) -> RosterView:
    roster = RosterState(
        id=RosterId(7), guild_id=GuildId("g"), channel_id=ChannelId("c"),
        message_id=MessageId("m"), author_id=UserId("a"),
        max_capacity=capacity, created_at=datetime.now(timezone.utc),
    )
    return RosterView(roster=roster, joined_users=[UserId(u) for u in joined])


def test_format_mention():
    assert format_mention("123") == "<@123>"


def test_format_bold():
    assert format_bold("x") == "**x**"


def test_format_user_list_default_separator_is_newline():
    assert format_user_list([UserId("1"), UserId("2")]) == "<@1>\n<@2>"


def test_title_and_description():
    view = _view(4, ["a"])
    assert format_roster_title(view) == "📢 Recruiting @4"
    assert format_roster_description(view) == "<@a> started recruiting"


def test_join_message_shows_remaining_while_open():
    view = _view(3, ["a", "b"])
    assert format_join_message(UserId("b"), view) == "<@b> joined. @2"


def test_join_message_roll_call_when_exactly_full():
    view = _view(1, ["a", "b"])
    assert format_join_message(UserId("b"), view) == (
        "<@b> joined.\n\n**[Recruitment closed]**\n<@a> <@b>"
    )


def test_join_message_plain_when_overflowing():
    view = _view(1, ["a", "b", "c"])
    assert format_join_message(UserId("c"), view) == "<@c> joined."


def test_withdrawal_message():
    view = _view(2, ["a"])
    assert format_withdrawal_message(UserId("b"), view) == "<@b> withdrew. @2"
