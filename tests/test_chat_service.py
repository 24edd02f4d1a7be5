"""Test suite for the message store."""

import asyncio
from uuid import uuid4

import pytest

from keyword_chat.domain.exceptions import ConversationNotFoundError
from keyword_chat.domain.models import Author, ConversationState
from keyword_chat.repositories.memory import InMemoryRepository
from keyword_chat.services.chat import ChatService
from keyword_chat.services.responder import FALLBACK_RESPONSE, GREETING_RESPONSE


class BrokenResponder:
    def respond(self, text):
        raise RuntimeError("responder down")


async def make_conversation(delay: float = 0.0):
    service = ChatService(InMemoryRepository(), reply_delay=delay)
    conversation = await service.repository.create_conversation()
    return service, conversation.id


@pytest.mark.asyncio
async def test_submit_appends_user_and_bot_entries():
    service, conversation_id = await make_conversation()

    entry = await service.submit(conversation_id, "Hi there")
    assert entry.author == Author.USER
    assert entry.text == "Hi there"

    await service.wait_for_reply(conversation_id)
    entries = await service.repository.get_entries(conversation_id)
    assert [e.author for e in entries] == [Author.USER, Author.BOT]
    assert entries[1].text == GREETING_RESPONSE


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
async def test_blank_submission_is_ignored(text):
    service, conversation_id = await make_conversation()

    assert await service.submit(conversation_id, text) is None
    await service.wait_for_reply(conversation_id)

    assert await service.repository.get_entries(conversation_id) == []
    assert service.pending_replies(conversation_id) == 0


@pytest.mark.asyncio
async def test_state_cycle():
    service, conversation_id = await make_conversation(delay=0.05)

    await service.submit(conversation_id, "xyz unrelated query")
    conversation = await service.repository.get_conversation(conversation_id)
    assert conversation.state == ConversationState.AWAITING_REPLY
    assert len(conversation.entries) == 1
    assert service.pending_replies(conversation_id) == 1

    await service.wait_for_reply(conversation_id)
    conversation = await service.repository.get_conversation(conversation_id)
    assert conversation.state == ConversationState.IDLE
    assert conversation.entries[-1].text == FALLBACK_RESPONSE
    assert service.pending_replies(conversation_id) == 0


@pytest.mark.asyncio
async def test_multiple_submissions_before_reply():
    service, conversation_id = await make_conversation(delay=0.05)

    await service.submit(conversation_id, "hello")
    await service.submit(conversation_id, "help")
    assert service.pending_replies(conversation_id) == 2

    await service.wait_for_reply(conversation_id)
    entries = await service.repository.get_entries(conversation_id)
    assert len(entries) == 4
    assert [e.author for e in entries[:2]] == [Author.USER, Author.USER]
    conversation = await service.repository.get_conversation(conversation_id)
    assert conversation.state == ConversationState.IDLE


@pytest.mark.asyncio
async def test_submit_unknown_conversation():
    service = ChatService(InMemoryRepository(), reply_delay=0)
    with pytest.raises(ConversationNotFoundError):
        await service.submit(uuid4(), "hello")


@pytest.mark.asyncio
async def test_failed_reply_returns_to_idle():
    repository = InMemoryRepository()
    service = ChatService(repository, responder=BrokenResponder(), reply_delay=0)
    conversation = await repository.create_conversation()

    await service.submit(conversation.id, "hello")
    await service.wait_for_reply(conversation.id)

    stored = await repository.get_conversation(conversation.id)
    assert len(stored.entries) == 1
    assert stored.state == ConversationState.IDLE


@pytest.mark.asyncio
async def test_drain_waits_for_every_conversation():
    service = ChatService(InMemoryRepository(), reply_delay=0.02)
    ids = [(await service.repository.create_conversation()).id for _ in range(3)]

    await asyncio.gather(*[service.submit(cid, "about") for cid in ids])
    await service.drain()

    for cid in ids:
        assert len(await service.repository.get_entries(cid)) == 2
        assert service.pending_replies(cid) == 0


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        ChatService(InMemoryRepository(), reply_delay=-1)
