"""
LLM (OpenAI Chat Completions)

NOTE: SDK 버전 변동 이슈를 피하려고 REST로 직접 호출한다.

- chat_complete(): 시스템 페르소나 + 유저 프롬프트 -> 텍스트 한 덩어리
- parse_lines(): "1. ...\n2. ..." 같은 줄 목록을 깔끔한 리스트로
"""

from __future__ import annotations

import re
from typing import List

import requests

from backend.app.core.config import settings
from backend.app.core.errors import ConfigError, UpstreamError
from backend.app.core.logger import get_logger

logger = get_logger(__name__)

_NUMBER_PREFIX = re.compile(r"^\d+\.\s*")


def require_api_key() -> str:
    if not settings.OPENAI_API_KEY:
        raise ConfigError("OPENAI_API_KEY not set on server")
    return settings.OPENAI_API_KEY


def chat_complete(system: str, user: str, max_tokens: int) -> str:
    api_key = require_api_key()

    url = f"{settings.OPENAI_BASE_URL}/chat/completions"
    headers = {"Authorization": f"Bearer {api_key}"}
    payload = {
        "model": settings.OPENAI_MODEL,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        "max_tokens": max_tokens,
    }

    logger.info("chat completion 호출: model=%s max_tokens=%d", settings.OPENAI_MODEL, max_tokens)
    try:
        r = requests.post(url, headers=headers, json=payload, timeout=settings.OPENAI_TIMEOUT)
    except requests.RequestException as e:
        raise UpstreamError("OpenAI chat completion failed", detail=str(e)) from e

    if r.status_code >= 400:
        raise UpstreamError(
            "OpenAI chat completion failed",
            detail=f"{r.status_code} {r.text[:500]}",
        )

    choices = r.json().get("choices") or []
    if not choices:
        return ""
    content = (choices[0].get("message") or {}).get("content") or ""
    return content.strip()


def parse_lines(text: str, limit: int) -> List[str]:
    out = []
    for line in re.split(r"\r?\n", text or ""):
        line = _NUMBER_PREFIX.sub("", line.strip()).strip()
        if line:
            out.append(line)
    return out[:limit]
