"""Message store: accepts user text and appends delayed bot replies."""

import asyncio
import time
from typing import Dict, Optional, Set
from uuid import UUID

import structlog

from ..domain.models import Author, ChatEntry, ConversationState
from ..metrics import ENTRIES, ERRORS, IGNORED_SUBMISSIONS, REPLY_DELAY
from ..repositories.base import Repository
from .responder import ResponderService

logger = structlog.get_logger()


class ChatService:
    """Runs the idle -> awaiting_reply -> idle cycle of each conversation.

    Every accepted submission schedules its own reply task. A conversation
    stays in ``awaiting_reply`` until all of its reply tasks have finished.
    Replies are never cancelled; ``drain`` waits for them instead.
    """

    def __init__(
        self,
        repository: Repository,
        responder: Optional[ResponderService] = None,
        reply_delay: float = 1.0
    ) -> None:
        if reply_delay < 0:
            raise ValueError("reply_delay must not be negative")
        self.repository = repository
        self.responder = responder or ResponderService()
        self.reply_delay = reply_delay
        self._pending: Dict[UUID, Set[asyncio.Task]] = {}
        # Serializes pending bookkeeping with the state written to the repository.
        self._state_lock = asyncio.Lock()
        logger.info("chat_service_initialized", reply_delay=reply_delay)

    async def submit(self, conversation_id: UUID, text: str) -> Optional[ChatEntry]:
        """Store user text and schedule the reply.

        Blank text is ignored and ``None`` is returned. Raises
        ``ConversationNotFoundError`` for an unknown conversation.
        """
        if not text or not text.strip():
            IGNORED_SUBMISSIONS.inc()
            logger.debug("submission_ignored", conversation_id=str(conversation_id))
            return None

        entry = ChatEntry(text=text, author=Author.USER)
        async with self._state_lock:
            await self.repository.append_entry(conversation_id, entry)
            ENTRIES.labels(author=Author.USER.value).inc()
            await self.repository.set_state(conversation_id, ConversationState.AWAITING_REPLY)
            task = asyncio.create_task(self._reply(conversation_id, text, time.monotonic()))
            self._pending.setdefault(conversation_id, set()).add(task)

        logger.info(
            "reply_scheduled",
            conversation_id=str(conversation_id),
            delay=self.reply_delay,
            pending=len(self._pending.get(conversation_id, ()))
        )
        return entry

    async def _reply(self, conversation_id: UUID, text: str, submitted_at: float) -> None:
        task = asyncio.current_task()
        try:
            await asyncio.sleep(self.reply_delay)
            reply = ChatEntry(text=self.responder.respond(text), author=Author.BOT)
            await self.repository.append_entry(conversation_id, reply)
            ENTRIES.labels(author=Author.BOT.value).inc()
            REPLY_DELAY.observe(time.monotonic() - submitted_at)
        except Exception as e:
            ERRORS.labels(source="reply").inc()
            logger.error("reply_failed", conversation_id=str(conversation_id), error=str(e))
        finally:
            async with self._state_lock:
                tasks = self._pending.get(conversation_id)
                if tasks is not None:
                    tasks.discard(task)
                    if not tasks:
                        del self._pending[conversation_id]
                if conversation_id not in self._pending:
                    await self.repository.set_state(conversation_id, ConversationState.IDLE)

    def pending_replies(self, conversation_id: UUID) -> int:
        return len(self._pending.get(conversation_id, ()))

    async def wait_for_reply(self, conversation_id: UUID) -> None:
        """Wait for every reply scheduled so far for this conversation."""
        tasks = list(self._pending.get(conversation_id, ()))
        if tasks:
            await asyncio.gather(*tasks)

    async def drain(self) -> None:
        """Wait for all pending replies across conversations."""
        tasks = [task for tasks in self._pending.values() for task in tasks]
        if tasks:
            logger.info("chat_service_draining", pending=len(tasks))
            await asyncio.gather(*tasks)
