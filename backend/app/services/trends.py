"""
트렌드 해시태그 공급자

동작 규칙
1) TRENDS_SCRAPE=true 이면 헤드리스 크롬(Playwright)으로 Creative Center 페이지를 긁는다.
2) 스크랩이 꺼져 있거나, 0개가 나오거나, 뭐라도 터지면 고정 리스트(simulated)로 대체.
   -> /api/trends 는 어떤 경우에도 200을 준다.

추가로, 서드파티 트렌드 API(TIKTOK_API_KEY)에서 조회수/사운드까지 붙은 항목을 가져오는
fetch_trend_items()도 여기 둔다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import requests

from backend.app.core.config import settings
from backend.app.core.errors import ConfigError, UpstreamError
from backend.app.core.logger import get_logger
from backend.app.schemas import TrendItem

logger = get_logger(__name__)


FALLBACK_HASHTAGS = [
    "#fyp",
    "#viral",
    "#trend",
    "#challenge",
    "#lifehack",
    "#dance",
    "#funny",
    "#asmr",
    "#tutorial",
]

# 페이지 마크업이 자주 바뀌어서 후보 셀렉터를 여러 개 같이 건다
HASHTAG_SELECTORS = ", ".join([
    '[data-e2e="hashtag-name"]',
    ".hashtag-name",
    ".tag-name",
    ".creative-card__tag",
])


@dataclass
class TrendsResult:
    provider: str
    items: List[str]


def _scrape_hashtags() -> List[str]:
    # playwright는 스크랩 모드에서만 필요해서 여기서 import
    from playwright.sync_api import sync_playwright

    with sync_playwright() as p:
        browser = p.chromium.launch(
            headless=True,
            args=["--no-sandbox", "--disable-setuid-sandbox"],
        )
        try:
            page = browser.new_page()
            page.goto(
                settings.TRENDS_SCRAPE_URL,
                wait_until="domcontentloaded",
                timeout=settings.TRENDS_SCRAPE_TIMEOUT_MS,
            )
            page.wait_for_timeout(settings.TRENDS_SCRAPE_SETTLE_MS)
            texts = page.eval_on_selector_all(
                HASHTAG_SELECTORS,
                "nodes => nodes.map(n => n.innerText || '')",
            )
        finally:
            browser.close()

    items = [t.strip() for t in texts or [] if t and t.strip()]
    return items[: settings.TRENDS_SCRAPE_LIMIT]


def get_trends() -> TrendsResult:
    """
    스크랩 결과 또는 고정 리스트. 절대 예외를 밖으로 던지지 않는다.
    """
    if settings.TRENDS_SCRAPE:
        try:
            items = _scrape_hashtags()
            if items:
                logger.info("트렌드 스크랩 성공: %d개", len(items))
                return TrendsResult(provider="scrape", items=items)
            logger.warning("트렌드 스크랩 결과가 0개라 fallback 리스트를 사용합니다.")
        except Exception as e:
            logger.warning("트렌드 스크랩 실패. fallback 리스트로 대체합니다. err=%s", e)

    return TrendsResult(provider="simulated", items=list(FALLBACK_HASHTAGS))


def _to_item(raw: dict) -> TrendItem:
    stats = raw.get("stats") or {}
    music = raw.get("music") or {}
    return TrendItem(
        hashtag=str(raw.get("name") or "").strip(),
        video_count=stats.get("videoCount"),
        sound_title=music.get("title"),
    )


def fetch_trend_items(limit: int = 10) -> List[TrendItem]:
    """
    서드파티 트렌드 API 조회 (해시태그 + 영상 수 + 대표 사운드)
    """
    if not settings.TIKTOK_API_KEY:
        raise ConfigError("TIKTOK_API_KEY not set on server")

    headers = {"Authorization": f"Bearer {settings.TIKTOK_API_KEY}"}
    try:
        r = requests.get(settings.TRENDS_API_URL, headers=headers, params={"limit": limit})
        r.raise_for_status()
        raw_trends = r.json()["trends"]
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        logger.warning("트렌드 API 호출 실패: %s", e)
        raise UpstreamError("Failed to fetch trends", detail=str(e)) from e

    items = [_to_item(t) for t in raw_trends if isinstance(t, dict)]
    return [it for it in items if it.hashtag]
