"""
캡션 파이프라인

(영상 업로드 -> 오디오 추출 -> STT) 또는 (아이디어 텍스트)
  -> 트렌드 해시태그 붙이기
  -> LLM 1회차: 캡션 4개
  -> LLM 2회차: 사운드 추천 3개

중간에 하나라도 터지면 전체 실패. 부분 결과는 돌려주지 않는다.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from backend.app.core.errors import (
    AppError,
    BadRequestError,
    ConfigError,
    InternalError,
    UpstreamError,
    ValidationError,
)
from backend.app.core.logger import get_logger
from backend.app.services.llm import chat_complete, parse_lines, require_api_key
from backend.app.services.transcribe import discard, transcribe_media
from backend.app.services.trends import get_trends

logger = get_logger(__name__)

MAX_CAPTIONS = 4
MAX_SOUNDS = 3
PROMPT_TRENDS = 5

# 트렌드 조회 자체가 터졌을 때 쓰는 최소 리스트
DEFAULT_TRENDS = ["#fyp", "#viral", "#trend", "#funny"]

CAPTION_SYSTEM = "You are a TikTok strategist who crafts viral captions."
SOUND_SYSTEM = "You recommend TikTok trending sounds."

MISSING_INPUT = "Provide video file (field 'video') or JSON { idea }"
FAILED = "Caption generation failed"


@dataclass
class CaptionResult:
    captions: List[str]
    sounds: List[str]
    trends: List[str]


def _caption_prompt(context_text: str, trends_text: str) -> str:
    return f"""Video/transcript: {context_text}
Trending hashtags: {trends_text}

Generate 4 different TikTok caption variants:
- <= 120 characters
- Natural, human, viral tone
- Use emojis if natural
- Each caption should target a different niche/FYP:
  1. Educational/tutorial
  2. Funny/entertaining
  3. Lifestyle/relatable
  4. Challenge/trend
Return as a newline list."""


def _sound_prompt(context_text: str, trends_text: str) -> str:
    return f"""Transcript/context: {context_text}
Trending hashtags: {trends_text}

Suggest 3 trending TikTok sound types that would boost discoverability.
Examples: "lofi chill beat", "funny meme sound", "dramatic transition".
Keep them short and catchy."""


def _current_trends() -> List[str]:
    try:
        return list(get_trends().items)
    except Exception as e:
        logger.warning("트렌드 조회 실패, 기본 해시태그 사용: %s", e)
        return list(DEFAULT_TRENDS)


def _context_text(idea: Optional[str], media_path: Optional[Path]) -> str:
    if media_path is not None:
        return transcribe_media(media_path)
    if idea and idea.strip():
        return idea
    raise BadRequestError(MISSING_INPUT)


def generate_captions(idea: Optional[str] = None, media_path: Optional[Path] = None) -> CaptionResult:
    """
    idea 또는 media_path 중 하나는 꼭 있어야 함 (둘 다 있으면 영상 우선).
    업로드 원본(media_path)은 무슨 일이 있어도 마지막에 지운다.
    """
    try:
        require_api_key()
        context_text = _context_text(idea, media_path)

        trends = _current_trends()
        trends_text = " ".join(trends[:PROMPT_TRENDS])

        raw_captions = chat_complete(CAPTION_SYSTEM, _caption_prompt(context_text, trends_text), max_tokens=300)
        captions = parse_lines(raw_captions, MAX_CAPTIONS)

        raw_sounds = chat_complete(SOUND_SYSTEM, _sound_prompt(context_text, trends_text), max_tokens=150)
        sounds = parse_lines(raw_sounds, MAX_SOUNDS)

        logger.info("캡션 생성 완료: captions=%d sounds=%d", len(captions), len(sounds))
        return CaptionResult(captions=captions, sounds=sounds, trends=trends)

    except (ValidationError, ConfigError):
        raise
    except AppError as e:
        logger.error("캡션 생성 실패: %s (%s)", e.message, e.detail)
        detail = f"{e.message}: {e.detail}" if e.detail else e.message
        raise UpstreamError(FAILED, detail=detail) from e
    except Exception as e:
        logger.exception("캡션 생성 중 예기치 못한 에러")
        raise InternalError(FAILED, detail=str(e)) from e
    finally:
        discard(media_path)
