"""Service test fixtures — SQLite-backed store, in-memory double and FastAPI test client.

Invariants:
    - Every test gets a fresh SQLite database file under tmp_path
    - get_db_manager dependency overridden to the test manager
    - database.db_manager swapped for health probes that read the module singleton

Design Decisions:
    - File-backed SQLite rather than :memory: so concurrent units of work get separate
      connections and contend on the real write lock
    - fake_service runs the same RosterService over InMemory* repositories
"""

import pytest
from httpx import ASGITransport, AsyncClient

import rosterbot.infrastructure.database as db_module
from rosterbot.infrastructure.database import (
    DatabaseSessionManager, SqlAlchemyUnitOfWork, get_db_manager,
)
from rosterbot.infrastructure.roster_repository import (
    SqlAlchemyRosterRepository, SqlAlchemyParticipantRepository,
)
from rosterbot.main import app
from rosterbot.services.roster_service import RosterService
from tests.services.fake_store import (
    InMemoryStore, InMemoryUnitOfWork,
    InMemoryRosterRepository, InMemoryParticipantRepository,
)


@pytest.fixture
async def db_manager(tmp_path):
    manager = DatabaseSessionManager(
        f"sqlite+aiosqlite:///{tmp_path / 'rosters.db'}", pool_size=5, max_overflow=5,
    )
    await manager.create_schema()
    yield manager
    await manager.dispose()


@pytest.fixture
def roster_repo(db_manager):
    return SqlAlchemyRosterRepository(db_manager)


@pytest.fixture
def participant_repo(db_manager):
    return SqlAlchemyParticipantRepository(db_manager)


@pytest.fixture
def sql_service(db_manager, roster_repo, participant_repo):
    return RosterService(roster_repo, participant_repo, SqlAlchemyUnitOfWork(db_manager))


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def fake_uow(store):
    return InMemoryUnitOfWork(store)


@pytest.fixture
def fake_service(store, fake_uow):
    return RosterService(
        InMemoryRosterRepository(store), InMemoryParticipantRepository(store), fake_uow,
    )


@pytest.fixture
async def client(db_manager):
    """FastAPI test client bound to the test database."""
    app.dependency_overrides[get_db_manager] = lambda: db_manager
    original_manager = db_module.db_manager
    db_module.db_manager = db_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
