"""Canned-reply selection based on ordered keyword rules."""

from dataclasses import dataclass
from typing import Optional, Tuple

import structlog

from ..domain.models import SUGGESTIONS

logger = structlog.get_logger()

GREETING_RESPONSE = "Hello! How can I help you today?"
IDENTITY_RESPONSE = (
    "I'm a simple chat assistant. I answer a few common questions "
    "about who we are and what I can do."
)
COMPANY_RESPONSE = (
    "We are a small software company that builds friendly, easy to use "
    "mobile apps for everyday tasks."
)
CAPABILITY_RESPONSE = (
    "I can greet you, tell you who I am, share information about our "
    "company and point you to the suggestions below. Try one of them!"
)
FALLBACK_RESPONSE = (
    "I'm not sure I understand that yet. Feel free to ask me something "
    "else, or pick one of the suggestions."
)


@dataclass(frozen=True)
class KeywordRule:
    """Reply with ``response`` when any trigger occurs in the lowered text."""

    triggers: Tuple[str, ...]
    response: str

    def matches(self, lowered: str) -> bool:
        return any(trigger in lowered for trigger in self.triggers)


# Checked in order, first match wins.
RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(("hello", "hi"), GREETING_RESPONSE),
    KeywordRule(("who are you", "your name"), IDENTITY_RESPONSE),
    KeywordRule(("about",), COMPANY_RESPONSE),
    KeywordRule(("help",), CAPABILITY_RESPONSE),
)


def match_rule(text: str) -> Optional[int]:
    """Return the index of the first rule matching ``text``, or None."""
    lowered = text.lower()
    for index, rule in enumerate(RULES):
        if rule.matches(lowered):
            return index
    return None


def response_for(index: Optional[int]) -> str:
    """Map a rule index from ``match_rule`` to its reply."""
    if index is None:
        return FALLBACK_RESPONSE
    return RULES[index].response


def select_response(text: str) -> str:
    """Pick the canned reply for ``text``. Total over all strings."""
    return response_for(match_rule(text))


class ResponderService:
    """Keyword responder used by the chat service."""

    def suggestions(self) -> Tuple[str, ...]:
        return SUGGESTIONS

    def respond(self, text: str) -> str:
        index = match_rule(text)
        logger.info(
            "responder_matched" if index is not None else "responder_fallback",
            rule=index,
            text_length=len(text)
        )
        return response_for(index)
