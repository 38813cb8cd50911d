"""
Pydantic 스키마

- 요청/응답 계약을 여기 모아서 Swagger(/docs)에 그대로 노출
- 모든 성공 응답은 ok=True 를 같이 내려준다 (프론트가 ok만 보고 분기)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Drafts ---
class Draft(BaseModel):
    # 파일에 다른 키가 섞여 있어도 버리지 않고 그대로 보존
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="초안 ID (draft_<ms>_<hex>)")
    name: str = Field(..., description="초안 이름")
    caption: str = Field("", description="캡션 본문")
    hashtags: str = Field("", description="해시태그 (공백 구분 문자열)")
    created: str = Field(..., description="생성 시각 ISO-8601 UTC")
    updated: Optional[str] = Field(None, description="마지막 수정 시각")


class DraftCreate(BaseModel):
    # name 누락은 422가 아니라 우리 쪽 메시지("Missing name")로 400 처리
    name: Optional[str] = None
    caption: Optional[str] = None
    hashtags: Optional[str] = None


class DraftPatch(BaseModel):
    name: Optional[str] = None
    caption: Optional[str] = None
    hashtags: Optional[str] = None


class DraftResponse(BaseModel):
    ok: bool = True
    draft: Draft


class DraftListResponse(BaseModel):
    ok: bool = True
    drafts: List[Draft] = Field(default_factory=list)


class DeletedDraftResponse(BaseModel):
    ok: bool = True
    deleted: Draft


# --- Trends ---
class TrendsResponse(BaseModel):
    ok: bool = True
    provider: str = Field(..., description="scrape | simulated")
    data: List[str] = Field(default_factory=list, description="해시태그 리스트")


class TrendItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hashtag: str
    video_count: Optional[int] = Field(None, alias="videoCount")
    sound_title: Optional[str] = Field(None, alias="soundTitle")


class TrendItemsResponse(BaseModel):
    ok: bool = True
    provider: str = "api"
    items: List[TrendItem] = Field(default_factory=list)


# --- Caption ---
class CaptionRequest(BaseModel):
    idea: Optional[str] = Field(None, description="영상 아이디어/설명 텍스트")


class CaptionResponse(BaseModel):
    ok: bool = True
    captions: List[str] = Field(default_factory=list, description="캡션 최대 4개")
    sounds: List[str] = Field(default_factory=list, description="사운드 추천 최대 3개")
    trends: List[str] = Field(default_factory=list, description="프롬프트에 쓴 트렌드 해시태그")


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    detail: Optional[str] = None
