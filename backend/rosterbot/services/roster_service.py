"""Roster Service — the recruitment state machine: open, join, decline, cancel, close.

Invariants:
    - Each operation runs in exactly one unit-of-work; resolution and mutation share a transaction
    - The author is a joined participant from creation and can never change their own status
    - join/decline refuse a no-op transition (AlreadyJoined/AlreadyDeclined); cancel always applies
    - Views are rebuilt from the participant list after every mutation, never cached
    - close requires the author and hard-deletes the roster (participants cascade)
    - Every operation, get_view included, is bounded by a deadline; on expiry the transaction
      rolls back and OperationTimeoutError is raised
    - No retries: store failures surface unmodified as DatabaseError

Design Decisions:
    - Depends on core Protocols only: the SQLAlchemy store and the in-memory test double are
      interchangeable
    - Repository NotFound during resolution becomes RosterNotFoundError with the location attached
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, TypeVar

from rosterbot.core.domain_types import (
    GuildId, ChannelId, MessageId, UserId, ParticipantStatus, RosterStatus,
)
from rosterbot.core.errors import (
    ResourceNotFoundError, RosterNotFoundError, ErrorContext,
    AlreadyJoinedError, AlreadyDeclinedError, AuthorCannotActError,
    NotAuthorError, InvalidCapacityError, OperationTimeoutError,
)
from rosterbot.core.repository_protocols import (
    RosterRepository, ParticipantRepository, UnitOfWork, Transaction,
)
from rosterbot.core.roster_state import (
    RosterState, RosterView, StatusChange, build_view,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_OPERATION_TIMEOUT = 5.0


class RosterService:
    """Roster aggregate operations over injected repositories and unit-of-work."""

    def __init__(
        self,
        rosters: RosterRepository,
        participants: ParticipantRepository,
        uow: UnitOfWork,
        timeout_seconds: float = DEFAULT_OPERATION_TIMEOUT,
    ):
        self._rosters = rosters
        self._participants = participants
        self._uow = uow
        self._timeout = timeout_seconds

    async def open(
        self,
        guild_id: GuildId,
        channel_id: ChannelId,
        message_id: MessageId,
        max_capacity: int,
        author_id: UserId,
    ) -> RosterView:
        """Create a roster bound to (channel, message) with the author joined."""
        if max_capacity < 1:
            raise InvalidCapacityError(max_capacity)

        async def work(tx: Transaction) -> RosterView:
            roster = RosterState(
                guild_id=guild_id,
                channel_id=channel_id,
                message_id=message_id,
                author_id=author_id,
                max_capacity=max_capacity,
                created_at=datetime.now(timezone.utc),
                status=RosterStatus.OPENED,
            )
            roster.id = await self._rosters.create(tx, roster)
            await self._participants.upsert(
                tx, roster.id, author_id, ParticipantStatus.JOINED,
            )
            return await self._build_view(tx, roster)

        view = await self._run("open", work)
        logger.info(
            f"Roster {view.roster.id} opened (capacity {max_capacity})",
            extra={
                "roster_id": view.roster.id, "channel_id": channel_id,
                "message_id": message_id, "actor_id": author_id, "action": "open",
            },
        )
        return view

    async def join(
        self, channel_id: ChannelId, message_id: MessageId, actor_id: UserId,
    ) -> StatusChange:
        return await self._change_status(
            channel_id, message_id, actor_id, ParticipantStatus.JOINED,
        )

    async def decline(
        self, channel_id: ChannelId, message_id: MessageId, actor_id: UserId,
    ) -> StatusChange:
        return await self._change_status(
            channel_id, message_id, actor_id, ParticipantStatus.DECLINED,
        )

    async def cancel(
        self, channel_id: ChannelId, message_id: MessageId, actor_id: UserId,
    ) -> StatusChange:
        return await self._change_status(
            channel_id, message_id, actor_id, ParticipantStatus.CANCELED,
        )

    async def close(
        self, channel_id: ChannelId, message_id: MessageId, actor_id: UserId,
    ) -> None:
        """Delete the roster. Only its author may do this."""

        async def work(tx: Transaction) -> RosterState:
            roster = await self._resolve(tx, channel_id, message_id)
            if roster.author_id != actor_id:
                raise NotAuthorError(_context(channel_id, message_id, actor_id))
            await self._rosters.delete(tx, roster.id)
            return roster

        roster = await self._run("close", work)
        logger.info(
            f"Roster {roster.id} closed",
            extra={
                "roster_id": roster.id, "channel_id": channel_id,
                "message_id": message_id, "actor_id": actor_id, "action": "close",
            },
        )

    async def get_view(
        self, channel_id: ChannelId, message_id: MessageId,
    ) -> RosterView:
        """Read-only projection, outside any unit-of-work but under the deadline."""

        async def read() -> RosterView:
            roster = await self._resolve(None, channel_id, message_id)
            return await self._build_view(None, roster)

        return await self._within_deadline("get_view", read())

    # ─── internals ──────────────────────────────────────────────

    async def _change_status(
        self,
        channel_id: ChannelId,
        message_id: MessageId,
        actor_id: UserId,
        status: ParticipantStatus,
    ) -> StatusChange:
        async def work(tx: Transaction) -> StatusChange:
            roster = await self._resolve(tx, channel_id, message_id)
            if roster.author_id == actor_id:
                raise AuthorCannotActError(_context(channel_id, message_id, actor_id))

            current = await self._participants.find_one(tx, roster.id, actor_id)
            previous = current.status if current is not None else None
            if previous == status:
                ctx = _context(channel_id, message_id, actor_id)
                if status == ParticipantStatus.JOINED:
                    raise AlreadyJoinedError(ctx)
                if status == ParticipantStatus.DECLINED:
                    raise AlreadyDeclinedError(ctx)

            await self._participants.upsert(tx, roster.id, actor_id, status)
            view = await self._build_view(tx, roster)
            return StatusChange(view=view, previous_status=previous)

        change = await self._run(status.value, work)
        logger.info(
            f"Participant {actor_id} {status.value} roster {change.view.roster.id}",
            extra={
                "roster_id": change.view.roster.id, "channel_id": channel_id,
                "message_id": message_id, "actor_id": actor_id,
                "action": status.value,
            },
        )
        return change

    async def _resolve(
        self, tx: Transaction | None, channel_id: ChannelId, message_id: MessageId,
    ) -> RosterState:
        try:
            return await self._rosters.get_by_location(tx, channel_id, message_id)
        except ResourceNotFoundError:
            raise RosterNotFoundError(channel_id, message_id) from None

    async def _build_view(
        self, tx: Transaction | None, roster: RosterState,
    ) -> RosterView:
        participants = await self._participants.list_by_roster(tx, roster.id)
        return build_view(roster, participants)

    async def _run(
        self, operation: str, work: Callable[[Transaction], Awaitable[T]],
    ) -> T:
        """Run work in one unit-of-work under the operation deadline."""
        return await self._within_deadline(operation, self._uow.run(work))

    async def _within_deadline(self, operation: str, aw: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(aw, timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.error(
                f"Roster operation '{operation}' timed out after {self._timeout}s",
                extra={"action": operation, "error_code": "OPERATION_TIMEOUT"},
            )
            raise OperationTimeoutError(operation, self._timeout) from None


def _context(channel_id: str, message_id: str, actor_id: str) -> ErrorContext:
    return ErrorContext(channel_id=channel_id, message_id=message_id, actor_id=actor_id)
