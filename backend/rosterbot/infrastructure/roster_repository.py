"""SQLAlchemy Repositories — RosterRepository and ParticipantRepository over the relational store.

Invariants:
    - Calls with a tx route every statement through that transaction
    - Calls with tx=None open a short transaction from the ambient pool and commit it
    - get/get_by_location raise ResourceNotFoundError on no match
    - update/delete/delete_all_by_roster raise ResourceNotFoundError when zero rows are affected
      (lost-update detection)
    - upsert never creates a second row for (roster_id, user_id); created_at is preserved
    - list_by_roster orders by created_at ascending, then user_id
    - Repositories map rows to core dataclasses; ORM objects never leave this module
    - Selects use populate_existing: rows changed by Core upserts in the same
      transaction must not be served stale from the identity map

Design Decisions:
    - Dialect insert (sqlite/postgresql) for ON CONFLICT DO UPDATE: one statement, race-free
    - No business rules here; the engine owns every decision to mutate
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy import select, update, delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from rosterbot.core.domain_types import (
    RosterId, GuildId, ChannelId, MessageId, UserId,
    RosterStatus, ParticipantStatus,
)
from rosterbot.core.errors import ResourceNotFoundError
from rosterbot.core.roster_state import RosterState, Participant
from rosterbot.infrastructure.database import DatabaseSessionManager
from rosterbot.models.roster import RosterRow
from rosterbot.models.participant import ParticipantRow

logger = logging.getLogger(__name__)


class _RepositoryBase:
    def __init__(self, manager: DatabaseSessionManager):
        self._manager = manager

    @asynccontextmanager
    async def _executor(
        self, tx: AsyncSession | None,
    ) -> AsyncGenerator[AsyncSession, None]:
        """Active transaction if given, otherwise a fresh one from the pool."""
        if tx is not None:
            yield tx
            return
        async with self._manager.transaction() as session:
            yield session


class SqlAlchemyRosterRepository(_RepositoryBase):
    """Roster persistence (table `rosters`)."""

    async def get(self, tx: AsyncSession | None, roster_id: RosterId) -> RosterState:
        async with self._executor(tx) as db:
            row = (await db.execute(
                select(RosterRow).where(RosterRow.id == roster_id)
                .execution_options(populate_existing=True),
            )).scalar_one_or_none()
        if row is None:
            raise ResourceNotFoundError("Roster", str(roster_id))
        return _to_roster_state(row)

    async def get_by_location(
        self, tx: AsyncSession | None, channel_id: ChannelId, message_id: MessageId,
    ) -> RosterState:
        async with self._executor(tx) as db:
            row = (await db.execute(
                select(RosterRow).where(
                    RosterRow.channel_id == channel_id,
                    RosterRow.message_id == message_id,
                )
                .execution_options(populate_existing=True),
            )).scalar_one_or_none()
        if row is None:
            raise ResourceNotFoundError("Roster", f"{channel_id}/{message_id}")
        return _to_roster_state(row)

    async def create(self, tx: AsyncSession | None, roster: RosterState) -> RosterId:
        row = RosterRow(
            guild_id=roster.guild_id,
            channel_id=roster.channel_id,
            message_id=roster.message_id,
            author_id=roster.author_id,
            max_capacity=roster.max_capacity,
            status=roster.status.value,
            created_at=roster.created_at,
        )
        async with self._executor(tx) as db:
            db.add(row)
            await db.flush()
            return RosterId(row.id)

    async def update(self, tx: AsyncSession | None, roster: RosterState) -> None:
        stmt = (
            update(RosterRow)
            .where(RosterRow.id == roster.id)
            .values(
                guild_id=roster.guild_id,
                channel_id=roster.channel_id,
                message_id=roster.message_id,
                author_id=roster.author_id,
                max_capacity=roster.max_capacity,
                status=roster.status.value,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        async with self._executor(tx) as db:
            result = await db.execute(stmt)
        if result.rowcount == 0:
            raise ResourceNotFoundError("Roster", str(roster.id))

    async def delete(self, tx: AsyncSession | None, roster_id: RosterId) -> None:
        stmt = (
            delete(RosterRow)
            .where(RosterRow.id == roster_id)
            .execution_options(synchronize_session=False)
        )
        async with self._executor(tx) as db:
            result = await db.execute(stmt)
        if result.rowcount == 0:
            raise ResourceNotFoundError("Roster", str(roster_id))


class SqlAlchemyParticipantRepository(_RepositoryBase):
    """Participant persistence (table `participants`)."""

    async def upsert(
        self, tx: AsyncSession | None, roster_id: RosterId, user_id: UserId,
        status: ParticipantStatus,
    ) -> None:
        now = datetime.now(timezone.utc)
        async with self._executor(tx) as db:
            insert = _dialect_insert(db)
            stmt = insert(ParticipantRow).values(
                roster_id=roster_id, user_id=user_id, status=status.value,
                created_at=now, updated_at=now,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[ParticipantRow.roster_id, ParticipantRow.user_id],
                set_={"status": stmt.excluded.status, "updated_at": stmt.excluded.updated_at},
            )
            await db.execute(stmt)

    async def find_one(
        self, tx: AsyncSession | None, roster_id: RosterId, user_id: UserId,
    ) -> Participant | None:
        async with self._executor(tx) as db:
            row = (await db.execute(
                select(ParticipantRow).where(
                    ParticipantRow.roster_id == roster_id,
                    ParticipantRow.user_id == user_id,
                )
                .execution_options(populate_existing=True),
            )).scalar_one_or_none()
        return _to_participant(row) if row is not None else None

    async def list_by_roster(
        self, tx: AsyncSession | None, roster_id: RosterId,
    ) -> list[Participant]:
        async with self._executor(tx) as db:
            rows = (await db.execute(
                select(ParticipantRow)
                .where(ParticipantRow.roster_id == roster_id)
                .order_by(ParticipantRow.created_at.asc(), ParticipantRow.user_id.asc())
                .execution_options(populate_existing=True),
            )).scalars().all()
        return [_to_participant(r) for r in rows]

    async def delete_all_by_roster(
        self, tx: AsyncSession | None, roster_id: RosterId,
    ) -> int:
        stmt = (
            delete(ParticipantRow)
            .where(ParticipantRow.roster_id == roster_id)
            .execution_options(synchronize_session=False)
        )
        async with self._executor(tx) as db:
            result = await db.execute(stmt)
        if result.rowcount == 0:
            raise ResourceNotFoundError("Participants of roster", str(roster_id))
        logger.debug(f"Deleted {result.rowcount} participants of roster {roster_id}")
        return result.rowcount


def _dialect_insert(db: AsyncSession):
    """INSERT construct supporting on_conflict_do_update for the bound dialect."""
    name = db.get_bind().dialect.name
    if name == "postgresql":
        return postgresql.insert
    if name == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"upsert not supported for dialect {name!r}")


def _to_roster_state(row: RosterRow) -> RosterState:
    return RosterState(
        id=RosterId(row.id),
        guild_id=GuildId(row.guild_id),
        channel_id=ChannelId(row.channel_id),
        message_id=MessageId(row.message_id),
        author_id=UserId(row.author_id),
        max_capacity=row.max_capacity,
        status=RosterStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_participant(row: ParticipantRow) -> Participant:
    return Participant(
        roster_id=RosterId(row.roster_id),
        user_id=UserId(row.user_id),
        status=ParticipantStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
