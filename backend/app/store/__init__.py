"""Document store for the participants and messages collections."""

from .models import Message, MessageType, Participant, USER_MESSAGE_TYPES
from .service import ChatStore

__all__ = [
    "ChatStore",
    "Message",
    "MessageType",
    "Participant",
    "USER_MESSAGE_TYPES",
]
