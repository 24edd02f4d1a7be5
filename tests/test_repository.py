"""Test suite for the in-memory repository."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from keyword_chat.domain.exceptions import ConversationNotFoundError
from keyword_chat.domain.models import Author, ChatEntry, ConversationState
from keyword_chat.repositories.memory import InMemoryRepository


@pytest.mark.asyncio
async def test_entries_keep_insertion_order():
    repository = InMemoryRepository()
    conversation = await repository.create_conversation()

    for i in range(5):
        await repository.append_entry(conversation.id, ChatEntry(text=f"m{i}", author=Author.USER))

    entries = await repository.get_entries(conversation.id)
    assert [e.text for e in entries] == [f"m{i}" for i in range(5)]

    page = await repository.get_entries(conversation.id, limit=2, offset=2)
    assert [e.text for e in page] == ["m2", "m3"]


@pytest.mark.asyncio
async def test_returned_conversation_is_a_snapshot():
    repository = InMemoryRepository()
    conversation = await repository.create_conversation()
    snapshot = await repository.get_conversation(conversation.id)

    await repository.append_entry(conversation.id, ChatEntry(text="hi", author=Author.USER))

    assert snapshot.entries == []
    assert len((await repository.get_conversation(conversation.id)).entries) == 1


@pytest.mark.asyncio
async def test_list_most_recent_first():
    repository = InMemoryRepository()
    first = await repository.create_conversation()
    second = await repository.create_conversation()
    await repository.append_entry(first.id, ChatEntry(text="hi", author=Author.USER))

    listed = await repository.list_conversations()
    assert [c.id for c in listed] == [first.id, second.id]
    assert len(await repository.list_conversations(limit=1, offset=1)) == 1


@pytest.mark.asyncio
async def test_unknown_conversation():
    repository = InMemoryRepository()
    missing = uuid4()

    assert await repository.get_conversation(missing) is None
    with pytest.raises(ConversationNotFoundError):
        await repository.get_entries(missing)
    with pytest.raises(ConversationNotFoundError):
        await repository.append_entry(missing, ChatEntry(text="x", author=Author.BOT))
    with pytest.raises(ConversationNotFoundError):
        await repository.set_state(missing, ConversationState.IDLE)


def test_entries_are_immutable():
    entry = ChatEntry(text="hello", author=Author.USER)
    with pytest.raises(ValidationError):
        entry.text = "changed"
