"""Pydantic schemas for the participants API."""
from pydantic import BaseModel, Field, field_validator

from app.text import normalize_text


class ParticipantCreate(BaseModel):
    """Request body for POST /participants."""
    name: str = Field(..., description="Participant name")

    @field_validator("name", mode="before")
    @classmethod
    def _normalize(cls, value):
        return normalize_text(value)
