"""Prometheus metrics shared by the API and the chat service."""

from prometheus_client import CollectorRegistry, Counter, Histogram

# Registry for isolated metric collection
CUSTOM_REGISTRY = CollectorRegistry()

REQUESTS = Counter("requests_total", "Total requests by endpoint", ["path"], registry=CUSTOM_REGISTRY)
ERRORS = Counter("errors_total", "Total errors by source", ["source"], registry=CUSTOM_REGISTRY)
ENTRIES = Counter("entries_total", "Chat entries appended", ["author"], registry=CUSTOM_REGISTRY)
IGNORED_SUBMISSIONS = Counter(
    "ignored_submissions_total",
    "Submissions dropped because the text was blank",
    registry=CUSTOM_REGISTRY
)
REPLY_DELAY = Histogram(
    "reply_delay_seconds",
    "Time between a user entry and the bot reply",
    registry=CUSTOM_REGISTRY
)
