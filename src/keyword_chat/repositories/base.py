"""Base repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from ..domain.models import ChatEntry, Conversation, ConversationState


class Repository(ABC):
    """Abstract base class for conversation storage."""

    @abstractmethod
    async def get_conversation(self, conversation_id: UUID) -> Optional[Conversation]:
        """Retrieve a conversation by ID."""
        pass

    @abstractmethod
    async def list_conversations(self, limit: int = 100, offset: int = 0) -> List[Conversation]:
        """List conversations, most recently updated first."""
        pass

    @abstractmethod
    async def create_conversation(self) -> Conversation:
        """Create a new, empty conversation."""
        pass

    @abstractmethod
    async def append_entry(self, conversation_id: UUID, entry: ChatEntry) -> ChatEntry:
        """Append an entry to the end of a conversation."""
        pass

    @abstractmethod
    async def get_entries(
        self, conversation_id: UUID, limit: int = 100, offset: int = 0
    ) -> List[ChatEntry]:
        """Get entries of a conversation in insertion order."""
        pass

    @abstractmethod
    async def set_state(self, conversation_id: UUID, state: ConversationState) -> None:
        """Record the reply state of a conversation."""
        pass
