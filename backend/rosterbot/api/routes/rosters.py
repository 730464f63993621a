"""Roster Routes — HTTP adapter for opening rosters, reading them and relaying button presses.

Invariants:
    - Routes only translate HTTP <-> service calls; every rule lives in RosterService
    - Typed RosterBotErrors propagate to the global handlers (status from the error)
    - One RosterService per request, built on the process-wide DatabaseSessionManager
"""

import logging

from fastapi import APIRouter, Depends, status

from rosterbot.config import get_settings
from rosterbot.core.domain_types import GuildId, ChannelId, MessageId, UserId
from rosterbot.infrastructure.database import (
    DatabaseSessionManager, SqlAlchemyUnitOfWork, get_db_manager,
)
from rosterbot.infrastructure.roster_repository import (
    SqlAlchemyRosterRepository, SqlAlchemyParticipantRepository,
)
from rosterbot.schemas.roster import (
    RosterOpen, RosterViewResponse, InteractionRequest, InteractionResponse,
)
from rosterbot.services.interaction_dispatch import InteractionDispatch
from rosterbot.services.roster_service import RosterService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/rosters", tags=["rosters"])


def get_roster_service(
    manager: DatabaseSessionManager = Depends(get_db_manager),
) -> RosterService:
    return RosterService(
        SqlAlchemyRosterRepository(manager),
        SqlAlchemyParticipantRepository(manager),
        SqlAlchemyUnitOfWork(manager),
        timeout_seconds=get_settings().operation_timeout_seconds,
    )


@router.post(
    "", response_model=RosterViewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def open_roster(
    body: RosterOpen, service: RosterService = Depends(get_roster_service),
):
    """Bind a new roster to a posted message."""
    view = await service.open(
        GuildId(body.guild_id),
        ChannelId(body.channel_id),
        MessageId(body.message_id),
        body.max_capacity,
        UserId(body.author_id),
    )
    return RosterViewResponse.from_view(view)


@router.post("/interactions", response_model=InteractionResponse)
async def relay_interaction(
    body: InteractionRequest, service: RosterService = Depends(get_roster_service),
):
    """Resolve a button press back to its roster and apply it."""
    outcome = await InteractionDispatch(service).execute(
        body.custom_id,
        ChannelId(body.channel_id),
        MessageId(body.message_id),
        UserId(body.actor_id),
    )
    return InteractionResponse.from_outcome(outcome)


@router.get("/{channel_id}/{message_id}", response_model=RosterViewResponse)
async def get_roster(
    channel_id: str, message_id: str,
    service: RosterService = Depends(get_roster_service),
):
    view = await service.get_view(ChannelId(channel_id), MessageId(message_id))
    return RosterViewResponse.from_view(view)
