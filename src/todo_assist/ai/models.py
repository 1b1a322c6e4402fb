"""Request/response models for the chat entry point."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class HistoryPart(BaseModel):
    text: str


class HistoryTurn(BaseModel):
    """A previous user or model text turn replayed ahead of the new prompt."""

    role: Literal["user", "model"]
    parts: list[HistoryPart]


class ChatRequest(BaseModel):
    prompt: str = Field(min_length=1)
    history: list[HistoryTurn] = Field(default_factory=list)

    @field_validator("prompt")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt must not be blank")
        return value


class ChatResponse(BaseModel):
    response: str  # sanitized HTML
    timestamp: str  # ISO-8601
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class RequestContext:
    """Caller identity extracted from the authenticated session by the host."""

    user_seq: Optional[int] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    client_ip: Optional[str] = None
