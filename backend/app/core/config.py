"""
설정 로더

목표
- Python 3.9+에서도 문제 없이 돌아가게(= `str | None` 같은 3.10+ 문법 금지)
- .env가 좀 지저분해도, 깨지지 않게(extra ignore)
- 예전 Node 서버에서 쓰던 env 이름(USE_PUPPETEER)도 받아줌
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # .env 사용 + 알 수 없는 키 무시
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- API Keys ---
    OPENAI_API_KEY: Optional[str] = Field(default=None)
    TIKTOK_API_KEY: Optional[str] = Field(default=None)

    # --- OpenAI ---
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TRANSCRIBE_MODEL: str = "whisper-1"
    # None이면 requests 기본값(= 타임아웃 없음)
    OPENAI_TIMEOUT: Optional[float] = None

    # --- Trends ---
    TRENDS_API_URL: str = "https://api.tiktokglobaltrends.com/v1/trending"
    TRENDS_SCRAPE: bool = Field(
        default=False,
        validation_alias=AliasChoices("TRENDS_SCRAPE", "USE_PUPPETEER"),
    )
    TRENDS_SCRAPE_URL: str = (
        "https://ads.tiktok.com/business/creativecenter/inspiration/popular/hashtag/pc/global"
    )
    TRENDS_SCRAPE_TIMEOUT_MS: int = 30000
    TRENDS_SCRAPE_SETTLE_MS: int = 1500
    TRENDS_SCRAPE_LIMIT: int = 40

    # --- Server ---
    HOST: str = "127.0.0.1"
    PORT: int = 3000
    RATE_LIMIT_PER_MINUTE: int = 200

    # --- Paths ---
    PUBLIC_DIR: str = "public"
    DRAFTS_FILE: str = "data/drafts.json"
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_MB: int = 50


settings = Settings()
