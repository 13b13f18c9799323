"""Pydantic schemas for the messages API."""
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.text import normalize_text


class MessageBody(BaseModel):
    """Request body for POST /messages and PUT /messages/{id}.

    Emptiness and the allowed ``type`` values are checked by the message
    log so direct callers get the same rules.
    """
    to: str = Field(..., description="Recipient name or broadcast target")
    text: str = Field(..., description="Message body")
    type: str = Field(..., description="message or private_message")

    @field_validator("to", "text", "type", mode="before")
    @classmethod
    def _normalize(cls, value):
        return normalize_text(value)


def parse_limit(raw: Optional[str]) -> Optional[int]:
    """Parse the ``limit`` query parameter.

    Anything that is not an integer is treated as absent.
    """
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None
