"""
API 라우터

- /api/trends          : 트렌드 해시태그 (스크랩 or 고정 리스트)
- /api/trends/items    : 트렌드 API 상세(영상 수/사운드)
- /api/caption         : JSON {idea} 또는 멀티파트(video) -> 캡션 4 + 사운드 3
- /api/drafts          : 초안 CRUD

에러는 여기서 잡지 않는다. AppError를 던지면 main.py 핸들러가 {ok:false,...}로 바꿔줌.
막히는 작업(파일/외부 API/FFmpeg/브라우저)은 sync def(스레드풀) 또는 run_in_threadpool로 돌린다.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from backend.app.core.errors import ValidationError
from backend.app.schemas import (
    CaptionResponse,
    DeletedDraftResponse,
    DraftCreate,
    DraftListResponse,
    DraftPatch,
    DraftResponse,
    TrendItemsResponse,
    TrendsResponse,
)
from backend.app.services.caption import generate_captions
from backend.app.services.drafts import DraftStore, get_draft_store
from backend.app.services.storage import check_body_size, save_upload
from backend.app.services.trends import fetch_trend_items, get_trends

router = APIRouter(prefix="/api")

# 예전 클라이언트가 /trends 로 부르던 것도 살려둠
alt_router = APIRouter(tags=["trends"])


# ----------------- trends -----------------
@alt_router.get("/trends", response_model=TrendsResponse)
@router.get("/trends", response_model=TrendsResponse, tags=["trends"])
def trends():
    result = get_trends()
    return TrendsResponse(provider=result.provider, data=result.items)


@router.get("/trends/items", response_model=TrendItemsResponse, tags=["trends"])
def trend_items(limit: int = 10):
    return TrendItemsResponse(items=fetch_trend_items(limit=limit))


# ----------------- caption -----------------
async def _read_caption_input(request: Request):
    """
    멀티파트면 (idea 필드, video 파일), 아니면 JSON body의 idea.
    body가 비었거나 JSON이 아니면 idea 없음으로 취급 -> 파이프라인에서 400
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data") or content_type.startswith(
        "application/x-www-form-urlencoded"
    ):
        check_body_size(request.headers.get("content-length"))
        media_path: Optional[Path] = None
        # 블록을 나가면 Starlette가 스풀해둔 임시 파일도 닫힘
        async with request.form() as form:
            idea = form.get("idea")
            video = form.get("video")
            if isinstance(video, UploadFile) and video.filename:
                media_path = await save_upload(video)
        return (idea if isinstance(idea, str) else None), media_path

    raw = await request.body()
    if not raw.strip():
        return None, None
    try:
        body = json.loads(raw)
    except ValueError as e:
        raise ValidationError("Invalid JSON body", detail=str(e)) from e
    idea = body.get("idea") if isinstance(body, dict) else None
    return (str(idea) if idea else None), None


@router.post("/caption", response_model=CaptionResponse, tags=["caption"])
async def caption(request: Request):
    idea, media_path = await _read_caption_input(request)
    # 업로드 파일 정리는 generate_captions가 finally에서 한다
    result = await run_in_threadpool(generate_captions, idea=idea, media_path=media_path)
    return CaptionResponse(captions=result.captions, sounds=result.sounds, trends=result.trends)


# ----------------- drafts -----------------
@router.get("/drafts", response_model=DraftListResponse, response_model_exclude_none=True, tags=["drafts"])
def list_drafts(store: DraftStore = Depends(get_draft_store)):
    return DraftListResponse(drafts=store.list())


@router.post("/drafts", response_model=DraftResponse, response_model_exclude_none=True, tags=["drafts"])
def create_draft(payload: Optional[DraftCreate] = None, store: DraftStore = Depends(get_draft_store)):
    payload = payload or DraftCreate()
    draft = store.create(payload.name, caption=payload.caption, hashtags=payload.hashtags)
    return DraftResponse(draft=draft)


@router.put("/drafts/{draft_id}", response_model=DraftResponse, response_model_exclude_none=True, tags=["drafts"])
def update_draft(draft_id: str, patch: Optional[DraftPatch] = None, store: DraftStore = Depends(get_draft_store)):
    draft = store.update(draft_id, patch or DraftPatch())
    return DraftResponse(draft=draft)


@router.delete(
    "/drafts/{draft_id}",
    response_model=DeletedDraftResponse,
    response_model_exclude_none=True,
    tags=["drafts"],
)
def delete_draft(draft_id: str, store: DraftStore = Depends(get_draft_store)):
    return DeletedDraftResponse(deleted=store.delete(draft_id))
