"""
업로드 임시 저장

- 업로드 영상은 UPLOAD_DIR에 잠깐 두고, 캡션 파이프라인이 끝나면 지운다.
- 파일명: <epoch ms>-<랜덤 7자>-<원본 파일명>  (동시 업로드 충돌 방지)
"""

from __future__ import annotations

import secrets
import string
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from backend.app.core.config import settings
from backend.app.core.errors import ValidationError
from backend.app.core.logger import get_logger
from backend.app.services.transcribe import discard

logger = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024
# 멀티파트 경계/헤더/idea 필드 몫으로 허용하는 여유분
FORM_OVERHEAD = 64 * 1024
_ALPHABET = string.ascii_lowercase + string.digits


def upload_dir() -> Path:
    d = Path(settings.UPLOAD_DIR)
    d.mkdir(parents=True, exist_ok=True)
    return d


def upload_filename(original: str) -> str:
    # 경로 조작(../) 방지: 파일명만 남김
    base = Path(original or "").name or "upload"
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(7))
    return f"{int(time.time() * 1000)}-{suffix}-{base}"


def _too_large() -> ValidationError:
    return ValidationError(
        "Uploaded file is too large",
        detail=f"limit is {settings.MAX_UPLOAD_MB} MB",
    )


def check_body_size(content_length: Optional[str]) -> None:
    """
    폼 파싱(= 임시파일로 스풀) 전에 Content-Length만 보고 먼저 거른다.
    헤더가 없거나(chunked) 이상하면 save_upload의 바이트 카운트에 맡김
    """
    try:
        size = int(content_length or "")
    except ValueError:
        return
    if size > settings.MAX_UPLOAD_MB * 1024 * 1024 + FORM_OVERHEAD:
        raise _too_large()


async def save_upload(upload: UploadFile) -> Path:
    max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024
    dest = upload_dir() / upload_filename(upload.filename)

    written = 0
    with open(dest, "wb") as out:
        while True:
            chunk = await upload.read(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > max_bytes:
                break
            out.write(chunk)

    if written > max_bytes:
        discard(dest)
        raise _too_large()

    logger.info("업로드 저장: %s (%d bytes)", dest.name, written)
    return dest
