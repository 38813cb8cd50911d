import pytest
import requests

from backend.app.core.config import settings
from backend.app.core.errors import ConfigError, UpstreamError
from backend.app.services import llm


class _FakeResponse:
    def __init__(self, payload, status_code=200, text=""):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def json(self):
        return self._payload


@pytest.fixture
def captured_post(monkeypatch, openai_key):
    seen = {}

    def install(response):
        def fake_post(url, headers, json, timeout):
            seen.update(url=url, headers=headers, json=json, timeout=timeout)
            if isinstance(response, Exception):
                raise response
            return response

        monkeypatch.setattr(llm.requests, "post", fake_post)
        return seen

    return install


def test_chat_complete_payload_and_content(captured_post):
    seen = captured_post(_FakeResponse({"choices": [{"message": {"content": "  1. hi\n2. there \n"}}]}))

    out = llm.chat_complete("persona", "prompt text", max_tokens=300)

    assert out == "1. hi\n2. there"
    assert seen["url"] == "https://api.openai.com/v1/chat/completions"
    assert seen["headers"] == {"Authorization": "Bearer sk-test"}
    assert seen["json"] == {
        "model": "gpt-4o-mini",
        "messages": [
            {"role": "system", "content": "persona"},
            {"role": "user", "content": "prompt text"},
        ],
        "max_tokens": 300,
    }
    assert seen["timeout"] is None


def test_chat_complete_uses_configured_model_and_timeout(captured_post, monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_MODEL", "gpt-4.1-mini")
    monkeypatch.setattr(settings, "OPENAI_TIMEOUT", 20.0)
    seen = captured_post(_FakeResponse({"choices": [{"message": {"content": "ok"}}]}))

    llm.chat_complete("s", "u", max_tokens=150)

    assert seen["json"]["model"] == "gpt-4.1-mini"
    assert seen["json"]["max_tokens"] == 150
    assert seen["timeout"] == 20.0


@pytest.mark.parametrize(
    "payload",
    [
        {"choices": []},
        {},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{}]},
    ],
)
def test_chat_complete_empty_choices(captured_post, payload):
    captured_post(_FakeResponse(payload))
    assert llm.chat_complete("s", "u", max_tokens=10) == ""


def test_chat_complete_http_error(captured_post):
    captured_post(_FakeResponse({}, status_code=429, text="Rate limit reached"))

    with pytest.raises(UpstreamError) as exc:
        llm.chat_complete("s", "u", max_tokens=10)

    assert exc.value.message == "OpenAI chat completion failed"
    assert exc.value.detail == "429 Rate limit reached"


def test_chat_complete_transport_error(captured_post):
    captured_post(requests.ConnectionError("connection refused"))

    with pytest.raises(UpstreamError) as exc:
        llm.chat_complete("s", "u", max_tokens=10)

    assert exc.value.message == "OpenAI chat completion failed"
    assert "connection refused" in exc.value.detail


def test_chat_complete_without_key(monkeypatch):
    def must_not_post(*args, **kwargs):
        raise AssertionError("no request without a key")

    monkeypatch.setattr(llm.requests, "post", must_not_post)

    with pytest.raises(ConfigError) as exc:
        llm.chat_complete("s", "u", max_tokens=10)
    assert exc.value.message == "OPENAI_API_KEY not set on server"
