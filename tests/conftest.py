import pytest
from fastapi.testclient import TestClient

from scanassist.ai import AiAssistService
from scanassist.history import HistoryStore
from scanassist.main import app, get_ai_service, get_history_store, get_settings_store
from scanassist.settings_store import SettingsStore
from tests.test_ai_client import FakeClock, FakeGroq


@pytest.fixture
def stores(tmp_path):
    return HistoryStore(path=tmp_path / "history.json"), SettingsStore(path=tmp_path / "settings.json")


@pytest.fixture
def fake_groq():
    return FakeGroq(reply="extracted text")


@pytest.fixture
def ai_clock():
    return FakeClock()


@pytest.fixture
def client(stores, fake_groq, ai_clock):
    history, settings = stores
    service = AiAssistService(client_factory=lambda: fake_groq, cooldown_seconds=60, clock=ai_clock)
    app.dependency_overrides[get_history_store] = lambda: history
    app.dependency_overrides[get_settings_store] = lambda: settings
    app.dependency_overrides[get_ai_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
