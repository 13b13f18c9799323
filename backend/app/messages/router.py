"""Messages REST API router.

Endpoints:
    POST   /messages       - Post a public or private message
    GET    /messages       - Poll messages visible to the requesting user
    PUT    /messages/{id}  - Edit one of the requester's messages
    DELETE /messages/{id}  - Delete one of the requester's messages

The sender is identified by the ``user`` header.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from app.dependencies import get_current_user, get_message_log
from app.errors import (
    Forbidden,
    InvalidInput,
    NotFound,
    StoreFailure,
    Unauthenticated,
)
from app.store import Message

from .schemas import MessageBody, parse_limit
from .service import MessageLog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("", status_code=201)
async def post_message(
    body: MessageBody,
    user: Optional[str] = Depends(get_current_user),
    log: MessageLog = Depends(get_message_log),
) -> Response:
    """Append a message from the ``user`` header's participant.

    Returns:
        201 on success, 422 for an invalid body or an inactive sender.
    """
    try:
        await log.post(user, body.to, body.text, body.type)
    except (InvalidInput, Unauthenticated) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StoreFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(status_code=201)


@router.get("", response_model=List[Message])
async def list_messages(
    limit: Optional[str] = Query(None, description="Return only the last N messages"),
    user: Optional[str] = Depends(get_current_user),
    log: MessageLog = Depends(get_message_log),
) -> List[Message]:
    """Messages visible to the requester, oldest first."""
    try:
        return await log.list_visible_to(user, parse_limit(limit))
    except StoreFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/{message_id}", status_code=204)
async def edit_message(
    message_id: str,
    body: MessageBody,
    user: Optional[str] = Depends(get_current_user),
    log: MessageLog = Depends(get_message_log),
) -> Response:
    """Replace ``to``, ``text`` and ``type`` of the requester's message.

    Returns:
        204 on success, 404 if missing, 401 if not the author, 422 if invalid.
    """
    try:
        await log.edit(message_id, user, body.to, body.text, body.type)
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Forbidden as e:
        raise HTTPException(status_code=401, detail=str(e))
    except StoreFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(status_code=204)


@router.delete("/{message_id}", status_code=204)
async def delete_message(
    message_id: str,
    user: Optional[str] = Depends(get_current_user),
    log: MessageLog = Depends(get_message_log),
) -> Response:
    """Delete the requester's message.

    Returns:
        204 on success, 404 if missing, 401 if not the author.
    """
    try:
        await log.delete(message_id, user)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Forbidden as e:
        raise HTTPException(status_code=401, detail=str(e))
    except StoreFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(status_code=204)
