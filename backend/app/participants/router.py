"""Participants and heartbeat REST API router.

Endpoints:
    POST /participants - Join the chat
    GET  /participants - List active participants
    POST /status       - Heartbeat for the participant named in the ``user`` header
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from app.dependencies import get_current_user, get_presence_registry
from app.errors import Conflict, InvalidInput, NotFound, StoreFailure
from app.store import Participant

from .schemas import ParticipantCreate
from .service import PresenceRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["participants"])


@router.post("/participants", status_code=201)
async def join(
    body: ParticipantCreate,
    registry: PresenceRegistry = Depends(get_presence_registry),
) -> Response:
    """Register a new participant.

    Returns:
        201 on success, 422 for an empty name, 409 if the name is taken.
    """
    try:
        await registry.join(body.name)
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Conflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(status_code=201)


@router.get("/participants", response_model=List[Participant])
async def list_participants(
    registry: PresenceRegistry = Depends(get_presence_registry),
) -> List[Participant]:
    """List active participants in join order."""
    try:
        return await registry.list_active()
    except StoreFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/status")
async def heartbeat(
    user: Optional[str] = Depends(get_current_user),
    registry: PresenceRegistry = Depends(get_presence_registry),
) -> Response:
    """Keep the participant alive.

    Returns:
        200 on success, 404 if the participant is not active.
    """
    try:
        await registry.heartbeat(user)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(status_code=200)
