"""Boundary Protocols — persistence contracts between the roster engine and the store.

Invariants:
    - The engine depends only on these Protocols, never on SQLAlchemy
    - Every repository method takes the transaction handle as its first argument
    - tx=None means "no unit-of-work": the implementation uses its own short transaction
    - get/get_by_location/update/delete/delete_all_by_roster raise ResourceNotFoundError
      when no row matches
    - UnitOfWork.run commits on normal return, rolls back on any exception and re-raises it

Design Decisions:
    - Protocol over ABC: structural subtyping, the SQLAlchemy store and the in-memory
      test double share no base class
    - Explicit handle over ambient context: the transaction a call joins is visible at the call site
"""

from typing import Any, Awaitable, Callable, Protocol, TypeVar

from rosterbot.core.domain_types import (
    RosterId, ChannelId, MessageId, UserId, ParticipantStatus,
)
from rosterbot.core.roster_state import RosterState, Participant

T = TypeVar("T")

# Opaque to the engine; each store narrows it (AsyncSession for SQLAlchemy)
Transaction = Any


class RosterRepository(Protocol):
    """Contract for roster persistence."""
    async def get(self, tx: Transaction | None, roster_id: RosterId) -> RosterState: ...
    async def get_by_location(
        self, tx: Transaction | None, channel_id: ChannelId, message_id: MessageId,
    ) -> RosterState: ...
    async def create(self, tx: Transaction | None, roster: RosterState) -> RosterId: ...
    async def update(self, tx: Transaction | None, roster: RosterState) -> None: ...
    async def delete(self, tx: Transaction | None, roster_id: RosterId) -> None: ...


class ParticipantRepository(Protocol):
    """Contract for participant persistence. (roster_id, user_id) is unique."""
    async def upsert(
        self, tx: Transaction | None, roster_id: RosterId, user_id: UserId,
        status: ParticipantStatus,
    ) -> None: ...
    async def find_one(
        self, tx: Transaction | None, roster_id: RosterId, user_id: UserId,
    ) -> Participant | None: ...
    async def list_by_roster(
        self, tx: Transaction | None, roster_id: RosterId,
    ) -> list[Participant]: ...
    async def delete_all_by_roster(
        self, tx: Transaction | None, roster_id: RosterId,
    ) -> int: ...


class UnitOfWork(Protocol):
    """Runs fn(tx) inside one atomic transaction and returns its result."""
    async def run(self, fn: Callable[[Transaction], Awaitable[T]]) -> T: ...
