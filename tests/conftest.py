"""Shared fixtures."""

import pytest

from keyword_chat.api.app import app, get_chat_service, get_repository
from keyword_chat.repositories.memory import InMemoryRepository
from keyword_chat.services.chat import ChatService


@pytest.fixture
def chat_service():
    """A fresh store with no typing delay, wired into the app."""
    service = ChatService(InMemoryRepository(), reply_delay=0)
    app.dependency_overrides[get_chat_service] = lambda: service
    app.dependency_overrides[get_repository] = lambda: service.repository
    yield service
    app.dependency_overrides.clear()
