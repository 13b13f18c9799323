"""Records kept in the ``participants`` and ``messages`` collections.

Field names follow the JSON shape clients poll for (``lastStatus``,
``from``), so the same models double as API response schemas.
"""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MessageType(str, Enum):
    """Kind of chat event.

    Attributes:
        STATUS: System-generated join/leave announcement.
        MESSAGE: Public broadcast, visible to everyone.
        PRIVATE_MESSAGE: Visible only to its sender and recipient.
    """
    STATUS = "status"
    MESSAGE = "message"
    PRIVATE_MESSAGE = "private_message"


# Types a participant may author; status messages are system-only.
USER_MESSAGE_TYPES = (MessageType.MESSAGE.value, MessageType.PRIVATE_MESSAGE.value)


class Participant(BaseModel):
    """An active chat identity.

    Attributes:
        name: Unique participant name.
        lastStatus: Epoch milliseconds of the last join or heartbeat.
    """
    name: str = Field(..., description="Participant name")
    lastStatus: int = Field(..., description="Last heartbeat (epoch ms)")


class Message(BaseModel):
    """A single chat event in the message log.

    Attributes:
        id: Store-assigned identifier.
        from_: Sender name (serialised as ``from``).
        to: Recipient name or the broadcast target.
        text: Message body.
        type: Message kind.
        time: ``HH:MM:SS`` wall-clock time captured at insertion.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Message ID")
    from_: str = Field(..., alias="from", description="Sender name")
    to: str = Field(..., description="Recipient or broadcast target")
    text: str = Field(..., description="Message body")
    type: MessageType = Field(..., description="Message type")
    time: str = Field(..., description="HH:MM:SS at insertion")
