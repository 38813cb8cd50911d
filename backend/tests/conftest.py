import pytest
from fastapi.testclient import TestClient

from backend.app.core import rate_limit
from backend.app.core.config import settings
from backend.app.main import app
from backend.app.services.drafts import JsonFileDraftStore, get_draft_store


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
    monkeypatch.setattr(settings, "TIKTOK_API_KEY", None)
    monkeypatch.setattr(settings, "TRENDS_SCRAPE", False)
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "DRAFTS_FILE", str(tmp_path / "data" / "drafts.json"))
    monkeypatch.setattr(settings, "PUBLIC_DIR", str(tmp_path / "public"))
    monkeypatch.setattr(settings, "RATE_LIMIT_PER_MINUTE", 200)
    rate_limit.reset()
    yield
    rate_limit.reset()


@pytest.fixture
def store(tmp_path):
    return JsonFileDraftStore(tmp_path / "drafts.json")


@pytest.fixture
def client(store):
    app.dependency_overrides[get_draft_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def openai_key(monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
    return "sk-test"
