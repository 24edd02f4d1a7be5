"""Domain models for the chat application."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Tuple
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Author(str, Enum):
    """Who wrote an entry."""

    USER = "user"
    BOT = "bot"


class ConversationState(str, Enum):
    """Reply cycle of a conversation: idle -> awaiting_reply -> idle."""

    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"


class ChatEntry(BaseModel):
    """One turn in a conversation. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    text: str
    author: Author
    timestamp: datetime = Field(default_factory=utcnow)


class Conversation(BaseModel):
    """Conversation model."""

    id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    state: ConversationState = ConversationState.IDLE
    entries: List[ChatEntry] = Field(default_factory=list)


SUGGESTIONS: Tuple[str, ...] = (
    "Hello",
    "Who are you?",
    "Tell me about your company",
    "How can you help me?",
)
