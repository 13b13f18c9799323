"""Domain errors raised by the presence and message services.

Routers translate these into HTTP status codes; the services never
import FastAPI.
"""


class ChatError(Exception):
    """Base class for every error the chat core raises."""


class InvalidInput(ChatError):
    """Schema or shape violation the caller can correct."""


class Conflict(ChatError):
    """A participant with that name is already active."""


class NotFound(ChatError):
    """Unknown participant or message."""


class Forbidden(ChatError):
    """The requester is not the author of the message."""


class Unauthenticated(ChatError):
    """The claimed sender is not an active participant."""


class StoreFailure(ChatError):
    """The underlying document store failed."""
