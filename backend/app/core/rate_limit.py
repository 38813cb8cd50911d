"""
요청 수 제한 (클라이언트별, 1분 고정 윈도우)

- 카운터는 프로세스 메모리에만 둔다. 워커를 여러 개 띄우면 워커별로 따로 센다.
- 한도는 요청마다 settings에서 읽어서 .env만 바꿔도 반영되게 함
"""

from __future__ import annotations

from fastapi import Request
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from backend.app.core.config import settings
from backend.app.core.errors import RateLimitedError, error_response
from backend.app.core.logger import get_logger

logger = get_logger(__name__)

_storage = MemoryStorage()
_limiter = FixedWindowRateLimiter(_storage)


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def allow(key: str) -> bool:
    item = parse(f"{settings.RATE_LIMIT_PER_MINUTE}/minute")
    return _limiter.hit(item, "requests", key)


def reset() -> None:
    _storage.reset()


async def rate_limit_middleware(request: Request, call_next):
    key = client_key(request)
    if not allow(key):
        logger.warning("rate limit 초과: client=%s path=%s", key, request.url.path)
        return error_response(RateLimitedError("Too many requests"))
    return await call_next(request)
