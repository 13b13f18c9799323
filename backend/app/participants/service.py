"""Presence registry: admits, heartbeats and evicts participants.

Joining and leaving are announced in the message log as ``status``
messages. The participant write and its announcement are two independent
store writes: a join can survive without its announcement, but an
announcement is only ever written after the participant record exists.
"""
import logging
from typing import List, Set

from app.clock import SystemClock
from app.errors import InvalidInput, NotFound
from app.store import ChatStore, MessageType, Participant

logger = logging.getLogger(__name__)

JOIN_TEXT = "entra na sala..."
LEAVE_TEXT = "sai da sala..."
DEFAULT_BROADCAST_TARGET = "Todos"


class PresenceRegistry:
    """Tracks which names are active and when they were last seen."""

    def __init__(
        self,
        store: ChatStore,
        clock=None,
        broadcast_target: str = DEFAULT_BROADCAST_TARGET,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self.broadcast_target = broadcast_target

    async def join(self, name: str) -> Participant:
        """Register *name* and announce it.

        Raises:
            InvalidInput: If the name is empty.
            Conflict: If a participant with that name already exists.
            StoreFailure: If either write fails. A failed announcement
                leaves the participant registered.
        """
        if not isinstance(name, str) or not name:
            raise InvalidInput("name must be a non-empty string")

        now = self._clock.now_ms()
        participant = await self._store.insert_participant(name, now)
        logger.info("[presence] %s joined", name)

        await self._announce(name, JOIN_TEXT, now)
        return participant

    async def exists(self, name: str) -> bool:
        if not name:
            return False
        return await self._store.find_participant(name) is not None

    async def heartbeat(self, name: str) -> None:
        """Refresh the participant's ``lastStatus``.

        Raises:
            NotFound: If *name* is not an active participant.
        """
        if not name or not await self._store.update_participant_status(
            name, self._clock.now_ms()
        ):
            raise NotFound(f"participant {name!r} is not active")

    async def list_active(self) -> List[Participant]:
        return await self._store.list_participants()

    async def evict_stale(self, now: int, threshold_ms: int) -> Set[str]:
        """Remove every participant idle for more than *threshold_ms*.

        Each eviction is independent: a failure for one participant is
        logged and the rest of the batch continues. A participant that is
        still stale will be picked up again on the next call.

        Returns:
            Names that were deleted by this call.
        """
        evicted: Set[str] = set()
        for participant in await self._store.list_participants():
            if now - participant.lastStatus <= threshold_ms:
                continue
            name = participant.name
            try:
                deleted = await self._store.delete_participant(name)
            except Exception:
                logger.exception("[presence] Failed to evict %s", name)
                continue
            if not deleted:
                # Already removed by a concurrent sweep.
                continue
            evicted.add(name)
            logger.info(
                "[presence] Evicted %s (idle %dms > %dms)",
                name, now - participant.lastStatus, threshold_ms,
            )
            try:
                await self._announce(name, LEAVE_TEXT, now)
            except Exception:
                logger.exception("[presence] Failed to announce departure of %s", name)
        return evicted

    async def _announce(self, name: str, text: str, now: int) -> None:
        await self._store.insert_message(
            from_name=name,
            to_name=self.broadcast_target,
            text=text,
            type_=MessageType.STATUS.value,
            time=self._clock.format_time(now),
        )
