"""
HTML 쪽 라우트

- /auth/tiktok : OAuth 자리만 잡아둔 안내 페이지
- 그 외 GET    : public/ 정적 파일 -> 없으면 index.html (SPA fallback) -> 그것도 없으면 404

main.py에서 제일 마지막에 include 해야 API 라우트를 가리지 않는다.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import FileResponse, HTMLResponse, PlainTextResponse

from backend.app.core.config import settings

router = APIRouter(tags=["pages"])

OAUTH_PLACEHOLDER = """
<h3>TikTok OAuth placeholder</h3>
<p>Implement the OAuth redirect here. In production, redirect the user to your TikTok OAuth endpoint that begins the flow, then handle callback server-side.</p>
<p><a href="/">Return to app</a></p>
"""

INDEX_MISSING = "Index not found. Place your frontend in the ./public directory."


@router.get("/auth/tiktok", response_class=HTMLResponse)
def tiktok_auth():
    return HTMLResponse(OAUTH_PLACEHOLDER)


def _static_file(public_dir: Path, rel_path: str) -> Optional[Path]:
    if not rel_path:
        return None
    candidate = (public_dir / rel_path).resolve()
    # public/ 밖으로 나가는 경로(../)는 무시
    if public_dir not in candidate.parents:
        return None
    return candidate if candidate.is_file() else None


@router.get("/{full_path:path}", include_in_schema=False)
def spa_fallback(full_path: str):
    public_dir = Path(settings.PUBLIC_DIR).resolve()

    static = _static_file(public_dir, full_path)
    if static is not None:
        return FileResponse(static)

    index = public_dir / "index.html"
    if index.is_file():
        return FileResponse(index)
    return PlainTextResponse(INDEX_MISSING, status_code=404)
