import pytest

from backend.app.core.errors import ConfigError, InternalError, UpstreamError, ValidationError
from backend.app.services import caption
from backend.app.services.llm import parse_lines

CAPTION_OUTPUT = "\n".join([
    "1. Learn this in 10 seconds 🧠",
    "2. POV: your cat judges your cooking 😹",
    "",
    "3. Sunday reset, but make it cozy ☕",
    "4. Try this before it stops trending 🔥",
    "5. an extra line the model should not have written",
])
SOUND_OUTPUT = "1. lofi chill beat\r\n2. funny meme sound\r\n3. dramatic transition\r\n4. extra"


class FakeLLM:
    def __init__(self, *outputs):
        self.outputs = list(outputs)
        self.calls = []

    def __call__(self, system, user, max_tokens):
        self.calls.append({"system": system, "user": user, "max_tokens": max_tokens})
        out = self.outputs.pop(0)
        if isinstance(out, Exception):
            raise out
        return out


@pytest.fixture
def fake_llm(monkeypatch, openai_key):
    llm = FakeLLM(CAPTION_OUTPUT, SOUND_OUTPUT)
    monkeypatch.setattr(caption, "chat_complete", llm)
    return llm


def test_parse_lines_strips_numbering_and_blanks():
    assert parse_lines("1. a\n\n 2.  b \r\n3.c\nplain", 10) == ["a", "b", "c", "plain"]
    assert parse_lines("", 3) == []
    assert parse_lines("x\ny\nz", 2) == ["x", "y"]


def test_idea_pipeline_truncates_to_four_and_three(fake_llm):
    result = caption.generate_captions(idea="morning routine for students")

    assert result.captions == [
        "Learn this in 10 seconds 🧠",
        "POV: your cat judges your cooking 😹",
        "Sunday reset, but make it cozy ☕",
        "Try this before it stops trending 🔥",
    ]
    assert result.sounds == ["lofi chill beat", "funny meme sound", "dramatic transition"]
    assert len(result.trends) == 9


def test_prompts_carry_context_and_top_five_trends(fake_llm):
    caption.generate_captions(idea="morning routine for students")

    cap_call, sound_call = fake_llm.calls
    assert cap_call["system"] == caption.CAPTION_SYSTEM
    assert cap_call["max_tokens"] == 300
    assert "Video/transcript: morning routine for students" in cap_call["user"]
    assert "Trending hashtags: #fyp #viral #trend #challenge #lifehack\n" in cap_call["user"]
    assert "#dance" not in cap_call["user"]
    assert "1. Educational/tutorial" in cap_call["user"]
    assert "4. Challenge/trend" in cap_call["user"]

    assert sound_call["system"] == caption.SOUND_SYSTEM
    assert sound_call["max_tokens"] == 150
    assert "Transcript/context: morning routine for students" in sound_call["user"]


def test_underflowing_model_output_is_returned_as_is(monkeypatch, openai_key):
    monkeypatch.setattr(caption, "chat_complete", FakeLLM("only one caption", ""))
    result = caption.generate_captions(idea="x")
    assert result.captions == ["only one caption"]
    assert result.sounds == []


def test_trends_failure_uses_default_list(monkeypatch, fake_llm):
    def broken():
        raise RuntimeError("trends down")

    monkeypatch.setattr(caption, "get_trends", broken)
    result = caption.generate_captions(idea="x")

    assert result.trends == caption.DEFAULT_TRENDS
    assert "Trending hashtags: #fyp #viral #trend #funny\n" in fake_llm.calls[0]["user"]


def test_missing_key_is_config_error():
    with pytest.raises(ConfigError) as exc:
        caption.generate_captions(idea="x")
    assert exc.value.message == "OPENAI_API_KEY not set on server"


def test_missing_input_is_bad_request(openai_key):
    with pytest.raises(ValidationError) as exc:
        caption.generate_captions(idea="   ")
    assert exc.value.message == caption.MISSING_INPUT


def test_upstream_failure_wraps_with_detail(monkeypatch, openai_key):
    monkeypatch.setattr(
        caption,
        "chat_complete",
        FakeLLM(UpstreamError("OpenAI chat completion failed", detail="429 rate limited")),
    )
    with pytest.raises(UpstreamError) as exc:
        caption.generate_captions(idea="x")
    assert exc.value.message == "Caption generation failed"
    assert exc.value.detail == "OpenAI chat completion failed: 429 rate limited"


def test_second_call_failure_returns_nothing(monkeypatch, openai_key):
    monkeypatch.setattr(caption, "chat_complete", FakeLLM(CAPTION_OUTPUT, KeyError("choices")))
    with pytest.raises(InternalError) as exc:
        caption.generate_captions(idea="x")
    assert exc.value.message == "Caption generation failed"


def test_media_input_is_transcribed_and_deleted(monkeypatch, fake_llm, tmp_path):
    video = tmp_path / "clip.mp4"
    video.write_bytes(b"fake video")
    seen = []

    def fake_transcribe(path):
        seen.append(path)
        return "today I show you my desk setup"

    monkeypatch.setattr(caption, "transcribe_media", fake_transcribe)

    result = caption.generate_captions(idea="ignored", media_path=video)

    assert seen == [video]
    assert "Video/transcript: today I show you my desk setup" in fake_llm.calls[0]["user"]
    assert len(result.captions) == 4
    assert not video.exists()


def test_media_deleted_even_without_key(tmp_path):
    video = tmp_path / "clip.mp4"
    video.write_bytes(b"fake video")

    with pytest.raises(ConfigError):
        caption.generate_captions(media_path=video)
    assert not video.exists()


def test_media_deleted_when_transcription_fails(monkeypatch, openai_key, tmp_path):
    video = tmp_path / "clip.mp4"
    video.write_bytes(b"fake video")

    def broken(path):
        raise UpstreamError("Audio extraction failed", detail="moov atom not found")

    monkeypatch.setattr(caption, "transcribe_media", broken)

    with pytest.raises(UpstreamError) as exc:
        caption.generate_captions(media_path=video)
    assert exc.value.detail == "Audio extraction failed: moov atom not found"
    assert not video.exists()


# ---------------- HTTP ----------------
def test_caption_endpoint_with_idea(client, fake_llm):
    r = client.post("/api/caption", json={"idea": "gym motivation"})
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert len(body["captions"]) == 4
    assert len(body["sounds"]) == 3
    assert body["trends"][0] == "#fyp"


def test_caption_endpoint_without_input(client, openai_key):
    r = client.post("/api/caption")
    assert r.status_code == 400
    assert r.json() == {"ok": False, "error": "Provide video file (field 'video') or JSON { idea }"}


def test_caption_endpoint_without_key(client):
    r = client.post("/api/caption", json={"idea": "x"})
    assert r.status_code == 500
    assert r.json() == {"ok": False, "error": "OPENAI_API_KEY not set on server"}


def test_caption_endpoint_upstream_failure(client, monkeypatch, openai_key):
    monkeypatch.setattr(caption, "chat_complete", FakeLLM(UpstreamError("OpenAI chat completion failed", detail="500")))
    r = client.post("/api/caption", json={"idea": "x"})
    assert r.status_code == 500
    body = r.json()
    assert body["ok"] is False
    assert body["error"] == "Caption generation failed"
    assert body["detail"] == "OpenAI chat completion failed: 500"


def test_caption_endpoint_with_video_upload(client, monkeypatch, fake_llm, tmp_path):
    uploaded = []

    def fake_transcribe(path):
        uploaded.append(path)
        assert path.exists()
        assert path.name.endswith("-my clip.mp4")
        return "transcript"

    monkeypatch.setattr(caption, "transcribe_media", fake_transcribe)

    r = client.post("/api/caption", files={"video": ("my clip.mp4", b"\x00\x01video", "video/mp4")})

    assert r.status_code == 200
    assert len(r.json()["captions"]) == 4
    assert len(uploaded) == 1
    assert not uploaded[0].exists()
    assert list((tmp_path / "uploads").iterdir()) == []
