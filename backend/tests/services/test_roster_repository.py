"""SQLAlchemy Repositories — persistence contract against a real SQLite database.

Tests cover:
    - get/get_by_location NotFound
    - update/delete on missing rows raise NotFound
    - upsert keeps one row per (roster, user) and preserves created_at
    - roster delete cascades to participants
    - tx=None runs in its own committed transaction
    - equal created_at values list by user_id
    - delete_all_by_roster on an empty roster raises NotFound
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select, func

from rosterbot.core.domain_types import (
    RosterId, GuildId, ChannelId, MessageId, UserId,
    RosterStatus, ParticipantStatus,
)
from rosterbot.core.errors import ResourceNotFoundError, DatabaseError
from rosterbot.core.roster_state import RosterState
from rosterbot.models.participant import ParticipantRow


def _roster(message_id: str = "m1") -> RosterState:
    return RosterState(
        guild_id=GuildId("g1"),
        channel_id=ChannelId("c1"),
        message_id=MessageId(message_id),
        author_id=UserId("author"),
        max_capacity=3,
        created_at=datetime.now(timezone.utc),
    )


async def _participant_count(db_manager) -> int:
    async with db_manager.session() as db:
        return (await db.execute(select(func.count()).select_from(ParticipantRow))).scalar_one()


async def test_create_and_get(roster_repo):
    roster_id = await roster_repo.create(None, _roster())
    loaded = await roster_repo.get(None, roster_id)
    assert loaded.id == roster_id
    assert loaded.channel_id == "c1"
    assert loaded.status == RosterStatus.OPENED

    by_location = await roster_repo.get_by_location(None, ChannelId("c1"), MessageId("m1"))
    assert by_location.id == roster_id


async def test_get_missing_raises_not_found(roster_repo):
    with pytest.raises(ResourceNotFoundError):
        await roster_repo.get(None, RosterId(999))
    with pytest.raises(ResourceNotFoundError):
        await roster_repo.get_by_location(None, ChannelId("c1"), MessageId("nope"))


async def test_duplicate_location_is_database_error(roster_repo):
    await roster_repo.create(None, _roster())
    with pytest.raises(DatabaseError):
        await roster_repo.create(None, _roster())


async def test_update_changes_row(roster_repo):
    roster = _roster()
    roster.id = await roster_repo.create(None, roster)
    roster.status = RosterStatus.CLOSED
    roster.max_capacity = 5
    await roster_repo.update(None, roster)

    loaded = await roster_repo.get(None, roster.id)
    assert loaded.status == RosterStatus.CLOSED
    assert loaded.max_capacity == 5
    assert loaded.updated_at is not None


async def test_update_missing_raises_not_found(roster_repo):
    roster = _roster()
    roster.id = RosterId(42)
    with pytest.raises(ResourceNotFoundError):
        await roster_repo.update(None, roster)


async def test_delete_missing_raises_not_found(roster_repo):
    with pytest.raises(ResourceNotFoundError):
        await roster_repo.delete(None, RosterId(42))


async def test_upsert_keeps_single_row_and_created_at(roster_repo, participant_repo, db_manager):
    roster_id = await roster_repo.create(None, _roster())
    await participant_repo.upsert(None, roster_id, UserId("u1"), ParticipantStatus.JOINED)
    first = await participant_repo.find_one(None, roster_id, UserId("u1"))

    await participant_repo.upsert(None, roster_id, UserId("u1"), ParticipantStatus.DECLINED)
    second = await participant_repo.find_one(None, roster_id, UserId("u1"))

    assert second.status == ParticipantStatus.DECLINED
    assert second.created_at == first.created_at
    assert await _participant_count(db_manager) == 1


async def test_find_one_absent_returns_none(roster_repo, participant_repo):
    roster_id = await roster_repo.create(None, _roster())
    assert await participant_repo.find_one(None, roster_id, UserId("ghost")) is None


async def test_list_by_roster_in_creation_order(roster_repo, participant_repo):
    roster_id = await roster_repo.create(None, _roster())
    other_id = await roster_repo.create(None, _roster("m2"))
    for user in ("u1", "u2", "u3"):
        await participant_repo.upsert(None, roster_id, UserId(user), ParticipantStatus.JOINED)
    await participant_repo.upsert(None, other_id, UserId("x"), ParticipantStatus.JOINED)
    await participant_repo.upsert(None, roster_id, UserId("u1"), ParticipantStatus.DECLINED)

    listed = await participant_repo.list_by_roster(None, roster_id)
    assert [p.user_id for p in listed] == ["u1", "u2", "u3"]
    assert listed[0].status == ParticipantStatus.DECLINED


async def test_delete_roster_cascades_participants(roster_repo, participant_repo, db_manager):
    roster_id = await roster_repo.create(None, _roster())
    await participant_repo.upsert(None, roster_id, UserId("u1"), ParticipantStatus.JOINED)
    await participant_repo.upsert(None, roster_id, UserId("u2"), ParticipantStatus.DECLINED)

    await roster_repo.delete(None, roster_id)

    assert await _participant_count(db_manager) == 0
    assert await participant_repo.list_by_roster(None, roster_id) == []


async def test_delete_all_by_roster_returns_count(roster_repo, participant_repo):
    roster_id = await roster_repo.create(None, _roster())
    await participant_repo.upsert(None, roster_id, UserId("u1"), ParticipantStatus.JOINED)
    await participant_repo.upsert(None, roster_id, UserId("u2"), ParticipantStatus.JOINED)

    assert await participant_repo.delete_all_by_roster(None, roster_id) == 2
    with pytest.raises(ResourceNotFoundError):
        await participant_repo.delete_all_by_roster(None, roster_id)


async def test_list_by_roster_breaks_timestamp_ties_by_user(db_manager, roster_repo, participant_repo):
    roster_id = await roster_repo.create(None, _roster())
    same_instant = datetime(2026, 1, 1, tzinfo=timezone.utc)
    async with db_manager.transaction() as db:
        db.add_all([
            ParticipantRow(
                roster_id=roster_id, user_id=user, status="joined", created_at=same_instant,
            )
            for user in ("u3", "u1", "u2")
        ])

    listed = await participant_repo.list_by_roster(None, roster_id)
    assert [p.user_id for p in listed] == ["u1", "u2", "u3"]


async def test_calls_sharing_a_transaction_see_each_other(db_manager, roster_repo, participant_repo):
    async with db_manager.transaction() as tx:
        roster_id = await roster_repo.create(tx, _roster())
        await participant_repo.upsert(tx, roster_id, UserId("u1"), ParticipantStatus.JOINED)
        await participant_repo.upsert(tx, roster_id, UserId("u1"), ParticipantStatus.CANCELED)
        found = await participant_repo.find_one(tx, roster_id, UserId("u1"))
        assert found.status == ParticipantStatus.CANCELED

    listed = await participant_repo.list_by_roster(None, roster_id)
    assert [p.status for p in listed] == [ParticipantStatus.CANCELED]
