"""
에러 정의 + 응답 변환

라우트마다 try/except로 상태코드를 손으로 고르지 않도록
에러 종류(ErrorKind) -> HTTP 상태코드 매핑을 여기 한 곳에 모아둔다.

클라이언트는 항상 {"ok": false, "error": "...", "detail"?: "..."} 를 받는다.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from fastapi.responses import JSONResponse


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    CONFIG = "config"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.CONFIG: 500,
    ErrorKind.UPSTREAM: 500,
    ErrorKind.INTERNAL: 500,
}


class AppError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION


# 캡션 파이프라인 쪽에서 부르는 이름
BadRequestError = ValidationError


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND


class RateLimitedError(AppError):
    kind = ErrorKind.RATE_LIMITED


class ConfigError(AppError):
    kind = ErrorKind.CONFIG


class UpstreamError(AppError):
    kind = ErrorKind.UPSTREAM


class InternalError(AppError):
    kind = ErrorKind.INTERNAL


def error_body(message: str, detail: Optional[str] = None) -> dict:
    body = {"ok": False, "error": message}
    if detail:
        body["detail"] = detail
    return body


def error_response(err: AppError) -> JSONResponse:
    return JSONResponse(status_code=err.status_code, content=error_body(err.message, err.detail))
