"""
업로드 영상 -> 텍스트

1) FFmpeg로 오디오만 뽑는다 (mono mp3, 64k면 STT에는 충분하고 업로드도 가벼움)
2) OpenAI 음성인식(whisper)에 던진다
3) 뽑은 mp3는 성공/실패와 상관없이 지운다
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Optional

import requests

from backend.app.core.config import settings
from backend.app.core.errors import UpstreamError
from backend.app.core.logger import get_logger
from backend.app.services.llm import require_api_key

logger = get_logger(__name__)

FFMPEG_BIN = os.getenv("FFMPEG_BIN", "ffmpeg")


def _run(cmd: list[str]) -> subprocess.CompletedProcess:
    # FFmpeg 실행 유틸
    logger.info("FFmpeg 실행: %s", " ".join(cmd))
    try:
        p = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise UpstreamError("Audio extraction failed", detail=str(e)) from e
    if p.returncode != 0:
        raise UpstreamError("Audio extraction failed", detail=(p.stderr or "ffmpeg failed")[-1000:])
    return p


def discard(path: Optional[Path]) -> None:
    # 임시 파일 정리는 best-effort (실패해도 요청은 계속)
    if path is None:
        return
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        logger.debug("임시 파일 삭제 실패(무시): %s err=%s", path, e)


def extract_audio(video_path: Path) -> Path:
    audio_path = Path(f"{video_path}.mp3")
    cmd = [
        FFMPEG_BIN,
        "-y",
        "-i",
        str(video_path),
        "-vn",
        "-ac",
        "1",
        "-codec:a",
        "libmp3lame",
        "-b:a",
        "64k",
        str(audio_path),
    ]
    _run(cmd)
    return audio_path


def transcribe_audio(audio_path: Path) -> str:
    api_key = require_api_key()

    url = f"{settings.OPENAI_BASE_URL}/audio/transcriptions"
    headers = {"Authorization": f"Bearer {api_key}"}

    logger.info("음성인식 호출: model=%s file=%s", settings.OPENAI_TRANSCRIBE_MODEL, audio_path.name)
    try:
        with open(audio_path, "rb") as fh:
            r = requests.post(
                url,
                headers=headers,
                data={"model": settings.OPENAI_TRANSCRIBE_MODEL},
                files={"file": (audio_path.name, fh, "audio/mpeg")},
                timeout=settings.OPENAI_TIMEOUT,
            )
    except requests.RequestException as e:
        raise UpstreamError("OpenAI transcription failed", detail=str(e)) from e

    if r.status_code >= 400:
        raise UpstreamError(
            "OpenAI transcription failed",
            detail=f"{r.status_code} {r.text[:500]}",
        )
    return str(r.json().get("text") or "")


def transcribe_media(video_path: Path) -> str:
    audio_path = Path(f"{video_path}.mp3")
    try:
        audio_path = extract_audio(video_path)
        return transcribe_audio(audio_path)
    finally:
        discard(audio_path)
