"""Roster Bot API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map RosterBotError → structured JSON responses
    - Database initialized on startup via lifespan context manager, disposed on shutdown
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from rosterbot.api.error_handlers import register_error_handlers
from rosterbot.api.routes import health, rosters
from rosterbot.config import get_settings
from rosterbot.infrastructure.database import init_db
from rosterbot.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        isolation_level=settings.database_isolation_level,
        lock_timeout=settings.operation_timeout_seconds,
    )
    if settings.create_schema_on_startup:
        await manager.create_schema()
    logger.info("Roster bot API started")
    yield
    await manager.dispose()
    logger.info("Roster bot API shutting down")


app = FastAPI(title="Roster Bot API", version="1.0.0", lifespan=lifespan)

app.include_router(health.router)
app.include_router(rosters.router)

register_error_handlers(app)
