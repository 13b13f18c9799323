"""Message log: append, filtered retrieval, edit and delete.

Visibility rules:
    - ``status`` and ``message`` are broadcasts, visible to every viewer.
    - ``private_message`` is visible only to its sender and its recipient.
"""
import logging
from typing import List, Optional

from app.clock import SystemClock
from app.errors import Forbidden, InvalidInput, NotFound, Unauthenticated
from app.participants.service import PresenceRegistry
from app.store import ChatStore, Message, MessageType, USER_MESSAGE_TYPES

logger = logging.getLogger(__name__)

BROADCAST_TYPES = (MessageType.STATUS, MessageType.MESSAGE)


def is_visible_to(message: Message, viewer: Optional[str]) -> bool:
    """Return True if *viewer* may read *message*."""
    if message.type in BROADCAST_TYPES:
        return True
    return viewer is not None and viewer in (message.to, message.from_)


def validate_message_fields(to, text, type_) -> None:
    """Check a user-authored message body.

    Raises:
        InvalidInput: If ``to`` or ``text`` is empty, or ``type_`` is not
            ``message`` / ``private_message``.
    """
    if not isinstance(to, str) or not to:
        raise InvalidInput("'to' must be a non-empty string")
    if not isinstance(text, str) or not text:
        raise InvalidInput("'text' must be a non-empty string")
    if isinstance(type_, MessageType):
        type_ = type_.value
    if type_ not in USER_MESSAGE_TYPES:
        raise InvalidInput(f"'type' must be one of {', '.join(USER_MESSAGE_TYPES)}")


def _type_value(type_) -> str:
    return type_.value if isinstance(type_, MessageType) else type_


class MessageLog:
    """Append-only chat log with per-viewer filtering."""

    def __init__(
        self,
        store: ChatStore,
        registry: PresenceRegistry,
        clock=None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._clock = clock or SystemClock()

    async def post(self, from_name: str, to: str, text: str, type_: str) -> Message:
        """Append a user-authored message.

        Raises:
            InvalidInput: On a schema violation.
            Unauthenticated: If *from_name* is not an active participant.
        """
        validate_message_fields(to, text, type_)
        if not await self._registry.exists(from_name):
            raise Unauthenticated(f"{from_name!r} is not an active participant")

        return await self._store.insert_message(
            from_name=from_name,
            to_name=to,
            text=text,
            type_=_type_value(type_),
            time=self._clock.format_time(self._clock.now_ms()),
        )

    async def list_visible_to(
        self, viewer: Optional[str], limit: Optional[int] = None
    ) -> List[Message]:
        """Messages *viewer* may read, oldest first.

        Args:
            viewer: Requesting participant name (may be unknown or None).
            limit: When positive, keep only the most recent *limit*
                visible messages. None or non-positive returns all.
        """
        visible = [m for m in await self._store.list_messages() if is_visible_to(m, viewer)]
        if limit is not None and limit > 0:
            return visible[-limit:]
        return visible

    async def edit(
        self, message_id: str, editor: str, to: str, text: str, type_: str
    ) -> None:
        """Replace ``to``, ``text`` and ``type`` of the editor's own message.

        Raises:
            InvalidInput: On a schema violation.
            NotFound: If the message does not exist.
            Forbidden: If *editor* is not the message's author.
        """
        validate_message_fields(to, text, type_)
        message = await self._get_owned(message_id, editor)
        if not await self._store.update_message(message.id, to, text, _type_value(type_)):
            raise NotFound(f"message {message_id!r} not found")
        logger.info("[messages] %s edited %s", editor, message_id)

    async def delete(self, message_id: str, requester: str) -> None:
        """Delete the requester's own message.

        Raises:
            NotFound: If the message does not exist.
            Forbidden: If *requester* is not the message's author.
        """
        message = await self._get_owned(message_id, requester)
        if not await self._store.delete_message(message.id):
            raise NotFound(f"message {message_id!r} not found")
        logger.info("[messages] %s deleted %s", requester, message_id)

    async def _get_owned(self, message_id: str, actor: str) -> Message:
        message = await self._store.find_message(message_id)
        if message is None:
            raise NotFound(f"message {message_id!r} not found")
        if message.from_ != actor:
            raise Forbidden(f"{actor!r} is not the author of message {message_id!r}")
        return message
