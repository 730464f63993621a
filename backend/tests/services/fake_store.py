"""In-memory roster store — test double for the repository Protocols.

Invariants:
    - Same observable contract as the SQLAlchemy store: NotFound on missing rows,
      upsert keeps created_at, participants listed in creation order
    - InMemoryUnitOfWork restores a snapshot when fn raises (cancellation included)
    - Deleting a roster cascades to its participants
"""

import asyncio
import copy
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from rosterbot.core.domain_types import (
    RosterId, ChannelId, MessageId, UserId, ParticipantStatus,
)
from rosterbot.core.errors import ResourceNotFoundError
from rosterbot.core.roster_state import RosterState, Participant


@dataclass
class InMemoryStore:
    rosters: dict[RosterId, RosterState] = field(default_factory=dict)
    # keyed by (roster_id, user_id); dict order is insertion order
    participants: dict[tuple[RosterId, UserId], Participant] = field(default_factory=dict)
    next_id: int = 1
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def snapshot(self) -> tuple:
        return (
            copy.deepcopy(self.rosters),
            copy.deepcopy(self.participants),
            self.next_id,
        )

    def restore(self, snap: tuple) -> None:
        self.rosters, self.participants, self.next_id = snap


class InMemoryUnitOfWork:
    """Serializes units of work on one lock; rolls back by snapshot."""

    def __init__(self, store: InMemoryStore):
        self._store = store
        self.commits = 0
        self.rollbacks = 0

    async def run(self, fn):
        async with self._store.lock:
            snap = self._store.snapshot()
            try:
                result = await fn(self._store)
            except BaseException:
                self._store.restore(snap)
                self.rollbacks += 1
                raise
            self.commits += 1
            return result


class InMemoryRosterRepository:
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def get(self, tx, roster_id: RosterId) -> RosterState:
        roster = self._store.rosters.get(roster_id)
        if roster is None:
            raise ResourceNotFoundError("Roster", str(roster_id))
        return replace(roster)

    async def get_by_location(
        self, tx, channel_id: ChannelId, message_id: MessageId,
    ) -> RosterState:
        for roster in self._store.rosters.values():
            if roster.channel_id == channel_id and roster.message_id == message_id:
                return replace(roster)
        raise ResourceNotFoundError("Roster", f"{channel_id}/{message_id}")

    async def create(self, tx, roster: RosterState) -> RosterId:
        roster_id = RosterId(self._store.next_id)
        self._store.next_id += 1
        self._store.rosters[roster_id] = replace(roster, id=roster_id)
        return roster_id

    async def update(self, tx, roster: RosterState) -> None:
        if roster.id not in self._store.rosters:
            raise ResourceNotFoundError("Roster", str(roster.id))
        self._store.rosters[roster.id] = replace(
            roster, updated_at=datetime.now(timezone.utc),
        )

    async def delete(self, tx, roster_id: RosterId) -> None:
        if self._store.rosters.pop(roster_id, None) is None:
            raise ResourceNotFoundError("Roster", str(roster_id))
        for key in [k for k in self._store.participants if k[0] == roster_id]:
            del self._store.participants[key]


class InMemoryParticipantRepository:
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def upsert(
        self, tx, roster_id: RosterId, user_id: UserId, status: ParticipantStatus,
    ) -> None:
        now = datetime.now(timezone.utc)
        key = (roster_id, user_id)
        current = self._store.participants.get(key)
        if current is None:
            self._store.participants[key] = Participant(roster_id, user_id, status, now, now)
        else:
            self._store.participants[key] = replace(current, status=status, updated_at=now)

    async def find_one(self, tx, roster_id: RosterId, user_id: UserId) -> Participant | None:
        found = self._store.participants.get((roster_id, user_id))
        return replace(found) if found is not None else None

    async def list_by_roster(self, tx, roster_id: RosterId) -> list[Participant]:
        return [
            replace(p) for (rid, _), p in self._store.participants.items()
            if rid == roster_id
        ]

    async def delete_all_by_roster(self, tx, roster_id: RosterId) -> int:
        keys = [k for k in self._store.participants if k[0] == roster_id]
        if not keys:
            raise ResourceNotFoundError("Participants of roster", str(roster_id))
        for key in keys:
            del self._store.participants[key]
        return len(keys)
