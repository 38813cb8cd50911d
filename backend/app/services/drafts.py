"""
초안(Draft) 저장소

라우트는 DraftStore 인터페이스만 알고, 실제 저장은 어댑터가 한다.
지금은 JSON 파일 하나(JsonFileDraftStore)지만 나중에 SQLite 등으로 바꿔도
라우트 코드는 그대로 두면 된다.

주의: 읽기-수정-쓰기 사이에 락이 없다. 동시에 두 요청이 쓰면 한쪽 변경이
사라질 수 있음 (알려진 한계).
"""

from __future__ import annotations

import json
import secrets
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError as SchemaError

from backend.app.core.config import settings
from backend.app.core.errors import NotFoundError, ValidationError
from backend.app.core.logger import get_logger
from backend.app.schemas import Draft, DraftPatch

logger = get_logger(__name__)


def _now_iso() -> str:
    # JS의 toISOString()과 같은 모양: 2024-01-01T12:00:00.000Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _new_id(taken: set) -> str:
    while True:
        draft_id = f"draft_{int(time.time() * 1000)}_{secrets.token_hex(3)}"
        if draft_id not in taken:
            return draft_id


class DraftStore(ABC):
    @abstractmethod
    def list(self) -> List[Draft]:
        ...

    @abstractmethod
    def create(self, name: Optional[str], caption: Optional[str] = None, hashtags: Optional[str] = None) -> Draft:
        ...

    @abstractmethod
    def update(self, draft_id: str, patch: DraftPatch) -> Draft:
        ...

    @abstractmethod
    def delete(self, draft_id: str) -> Draft:
        ...


class JsonFileDraftStore(DraftStore):
    """
    pretty-print된 JSON 배열 하나에 전부 저장. 최신 초안이 맨 앞.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._ensure_file()

    def _ensure_file(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self.path.write_text("[]", encoding="utf-8")
        except OSError as e:
            logger.error("drafts 파일 준비 실패: %s err=%s", self.path, e)

    def _read(self) -> List[Union[Draft, dict]]:
        """
        레코드 단위로 검증한다. 스키마에 안 맞는 레코드는 원본 dict 그대로 들고 있다가
        다시 쓸 때 같은 자리에 돌려놓는다 (목록/수정 대상에서만 빠짐).
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
            data = json.loads(raw or "[]")
        except (OSError, ValueError) as e:
            # 파일이 깨져도 서버는 죽지 않게: 빈 목록으로 진행
            logger.warning("drafts 읽기 실패, 빈 목록으로 처리: %s", e)
            return []
        if not isinstance(data, list):
            logger.warning("drafts 파일이 배열이 아님, 빈 목록으로 처리: %s", type(data).__name__)
            return []

        records: List[Union[Draft, dict]] = []
        for item in data:
            try:
                records.append(Draft.model_validate(item))
            except SchemaError as e:
                logger.warning("draft 레코드 스키마 불일치, 원본 유지: %s", e.errors()[0].get("msg"))
                records.append(item)
        return records

    def _write(self, records: List[Union[Draft, dict]]) -> None:
        data = [r.model_dump(exclude_none=True) if isinstance(r, Draft) else r for r in records]
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    @staticmethod
    def _index_of(records: List[Union[Draft, dict]], draft_id: str) -> int:
        for i, r in enumerate(records):
            if isinstance(r, Draft) and r.id == draft_id:
                return i
        raise NotFoundError("Draft not found")

    @staticmethod
    def _taken_ids(records: List[Union[Draft, dict]]) -> set:
        return {r.id if isinstance(r, Draft) else r.get("id") for r in records if isinstance(r, (Draft, dict))}

    def list(self) -> List[Draft]:
        return [r for r in self._read() if isinstance(r, Draft)]

    def create(self, name: Optional[str], caption: Optional[str] = None, hashtags: Optional[str] = None) -> Draft:
        if not name:
            raise ValidationError("Missing name")

        records = self._read()
        draft = Draft(
            id=_new_id(self._taken_ids(records)),
            name=name,
            caption=caption or "",
            hashtags=hashtags or "",
            created=_now_iso(),
        )
        records.insert(0, draft)
        self._write(records)
        logger.info("draft 생성: %s", draft.id)
        return draft

    def update(self, draft_id: str, patch: DraftPatch) -> Draft:
        # 생성 때와 같은 규칙: 이름을 빈 문자열로 지울 수는 없음
        if patch.name is not None and not patch.name:
            raise ValidationError("Missing name")

        records = self._read()
        idx = self._index_of(records, draft_id)

        # 보낸 필드만 덮어쓴다 (None은 "안 보냄"으로 취급)
        changes = patch.model_dump(exclude_none=True)
        changes["updated"] = _now_iso()
        records[idx] = records[idx].model_copy(update=changes)

        self._write(records)
        return records[idx]

    def delete(self, draft_id: str) -> Draft:
        records = self._read()
        idx = self._index_of(records, draft_id)
        removed = records.pop(idx)
        self._write(records)
        logger.info("draft 삭제: %s", removed.id)
        return removed


def get_draft_store() -> DraftStore:
    # FastAPI Depends 용. 테스트에서는 dependency_overrides로 갈아끼움
    return JsonFileDraftStore(Path(settings.DRAFTS_FILE))
