"""FastAPI dependency providers.

Service instances are created once in the lifespan (see ``main.py``) and
stored on ``app.state``. Tests swap them via ``app.dependency_overrides``
or by building their own app around fresh instances.
"""
from typing import Optional

from fastapi import Header, Request

from app.messages.service import MessageLog
from app.participants.service import PresenceRegistry
from app.text import normalize_text


def get_presence_registry(request: Request) -> PresenceRegistry:
    return request.app.state.presence_registry


def get_message_log(request: Request) -> MessageLog:
    return request.app.state.message_log


def get_current_user(user: Optional[str] = Header(default=None)) -> Optional[str]:
    """The claimed identity from the ``user`` header, normalised.

    This is an untrusted claim: callers check it against the registry.
    """
    if user is None:
        return None
    return normalize_text(user) or None
