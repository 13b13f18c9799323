"""Shared test fixtures and configuration for backend tests."""
import pytest
from fastapi.testclient import TestClient

from app.clock import format_time
from app.config import AppConfig
from app.main import build_services, create_app
from app.messages.service import MessageLog
from app.participants.service import PresenceRegistry
from app.store import ChatStore

# 2024-01-01 12:00:00 UTC, in epoch milliseconds.
START_MS = 1_704_110_400_000


class ManualClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, now_ms: int = START_MS) -> None:
        self.now = now_ms

    def now_ms(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms

    def format_time(self, ms: int) -> str:
        return format_time(ms)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def store():
    """A fresh in-memory store per test."""
    chat_store = ChatStore(db_path=":memory:")
    yield chat_store
    chat_store.close()


@pytest.fixture
def registry(store, clock):
    return PresenceRegistry(store, clock=clock)


@pytest.fixture
def message_log(store, registry, clock):
    return MessageLog(store, registry, clock=clock)


@pytest.fixture
def app_config():
    config = AppConfig()
    config.storage.db_path = ":memory:"
    # Keep the background sweep out of the way unless a test shortens it.
    config.presence.sweep_interval_ms = 3_600_000
    return config


@pytest.fixture
def api_client(app_config, clock):
    """TestClient around a fresh app with in-memory storage; the lifespan and reaper run for the test."""
    test_app = create_app()
    build_services(test_app, app_config, clock=clock)
    with TestClient(test_app) as test_client:
        yield test_client
