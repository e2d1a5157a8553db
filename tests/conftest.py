"""
Test fixtures and configuration for pytest
"""

import sys
import threading

import pytest

import bugcatch
from bugcatch.config import Options

# A DSN that is never contacted: transports are faked or their session mocked.
TEST_DSN = "http://localhost:19999/ingest/test-project?key=test-key"


class FakeTransport:
    """Records what the client hands to the transport instead of sending it."""

    def __init__(self):
        self.events = []
        self.metrics = []
        self.closed = False

    def send_event(self, event_id, body):
        self.events.append((event_id, body))

    def send_metric(self, body):
        self.metrics.append(body)

    def close(self, wait=False):
        self.closed = True


@pytest.fixture(autouse=True)
def _clean_sdk_state(monkeypatch):
    """Auto-use guard: no client or stray hooks leak between tests, and
    ``BUGCATCH_*`` variables from the developer's shell are ignored.
    """
    for var in (
        "BUGCATCH_DSN",
        "BUGCATCH_RELEASE",
        "BUGCATCH_ENVIRONMENT",
        "BUGCATCH_DEBUG",
        "BUGCATCH_MAX_BREADCRUMBS",
        "BUGCATCH_AUTO_CAPTURE_ERRORS",
        "BUGCATCH_LOG_FORMAT",
        "BUGCATCH_LOG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)
    sys_hook = sys.excepthook
    thread_hook = threading.excepthook
    bugcatch.destroy()
    yield
    bugcatch.destroy()
    sys.excepthook = sys_hook
    threading.excepthook = thread_hook


@pytest.fixture
def dsn():
    return TEST_DSN


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def make_client(fake_transport):
    """Build a ``Client`` on the fake transport; destroyed after the test."""
    from bugcatch.client import Client

    created = []

    def _make(**kwargs):
        kwargs.setdefault("auto_capture_errors", False)
        client = Client(Options(dsn=TEST_DSN, **kwargs), transport=fake_transport)
        created.append(client)
        return client

    yield _make
    for client in created:
        client.destroy()


@pytest.fixture
def capture_hook():
    """A ``before_send`` hook that records events and drops them."""

    class _Hook:
        def __init__(self):
            self.events = []
            self.drop = True

        def __call__(self, event):
            self.events.append(event)
            return None if self.drop else event

        @property
        def last(self):
            return self.events[-1] if self.events else None

    return _Hook()
