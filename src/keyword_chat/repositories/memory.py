"""In-memory repository implementation."""

import asyncio
from typing import Dict, List, Optional
from uuid import UUID

import structlog

from ..domain.exceptions import ConversationNotFoundError
from ..domain.models import ChatEntry, Conversation, ConversationState
from .base import Repository

logger = structlog.get_logger()


class InMemoryRepository(Repository):
    """Process-local storage. Everything is lost when the process exits."""

    def __init__(self) -> None:
        self._conversations: Dict[UUID, Conversation] = {}
        self._lock = asyncio.Lock()
        logger.info("repository_initialized")

    def _require(self, conversation_id: UUID) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            logger.warning("conversation_not_found", conversation_id=str(conversation_id))
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def get_conversation(self, conversation_id: UUID) -> Optional[Conversation]:
        """Retrieve a copy of a conversation, or None if unknown."""
        async with self._lock:
            conversation = self._conversations.get(conversation_id)
            if conversation is None:
                return None
            return conversation.model_copy(update={"entries": list(conversation.entries)})

    async def list_conversations(self, limit: int = 100, offset: int = 0) -> List[Conversation]:
        async with self._lock:
            conversations = sorted(
                self._conversations.values(),
                key=lambda c: c.updated_at,
                reverse=True
            )
            return [
                c.model_copy(update={"entries": list(c.entries)})
                for c in conversations[offset : offset + limit]
            ]

    async def create_conversation(self) -> Conversation:
        conversation = Conversation()
        async with self._lock:
            self._conversations[conversation.id] = conversation
        logger.info("conversation_created", conversation_id=str(conversation.id))
        return conversation.model_copy(update={"entries": []})

    async def append_entry(self, conversation_id: UUID, entry: ChatEntry) -> ChatEntry:
        async with self._lock:
            conversation = self._require(conversation_id)
            conversation.entries.append(entry)
            conversation.updated_at = entry.timestamp
            logger.info(
                "entry_appended",
                conversation_id=str(conversation_id),
                author=entry.author.value,
                position=len(conversation.entries) - 1
            )
            return entry

    async def get_entries(
        self, conversation_id: UUID, limit: int = 100, offset: int = 0
    ) -> List[ChatEntry]:
        async with self._lock:
            conversation = self._require(conversation_id)
            return conversation.entries[offset : offset + limit]

    async def set_state(self, conversation_id: UUID, state: ConversationState) -> None:
        async with self._lock:
            conversation = self._require(conversation_id)
            if conversation.state != state:
                logger.debug(
                    "conversation_state_changed",
                    conversation_id=str(conversation_id),
                    previous=conversation.state.value,
                    current=state.value
                )
            conversation.state = state
