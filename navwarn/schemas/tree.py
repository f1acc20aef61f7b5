"""영역/카테고리 트리 Pydantic 요청/응답 스키마 정의.

Area / category tree Pydantic request/response schema definitions.
Areas and categories share the same shapes; the router decides which tree
a request targets.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from navwarn.core.tree import desc_map


def _unique_langs(descs: list["DescIn"] | None) -> list["DescIn"] | None:
    if descs is not None:
        desc_map(descs)
    return descs


# === 언어별 이름 (Description) 스키마 ===

class DescIn(BaseModel):
    """언어별 이름 입력 스키마.

    Localized name input.

    Attributes:
        lang: 언어 코드 (Language code, e.g. "en")
        name: 이름 (Localized name)
    """

    lang: str = Field(..., min_length=1, max_length=8)  # 언어 코드 (Language code)
    name: str = Field(..., min_length=1)  # 이름 (Localized name)


class DescResponse(BaseModel):
    lang: str
    name: str


# === 트리 노드 (Tree node) 스키마 ===

class TreeNodeCreate(BaseModel):
    """트리 노드 생성 요청 스키마.

    Tree node creation request schema.
    Without ``active`` the node inherits the parent's state (active for roots).

    Attributes:
        mrn: 자연키 (Natural key)
        parent_id: 부모 노드 UUID, 루트면 None (Parent node, None for roots)
        active: 명시적 활성 상태 (Explicit activation flag, optional)
        descs: 언어별 이름 (Localized names)
    """

    mrn: str = Field(..., min_length=1, max_length=255)
    parent_id: UUID | None = None
    active: bool | None = None
    descs: list[DescIn] = []

    _check_descs = field_validator("descs")(_unique_langs)


class TreeNodeUpdate(BaseModel):
    """트리 노드 수정 요청 스키마 (부분 업데이트).

    Tree node update request schema (partial update). Moves and activation
    changes go through their own endpoints so the engine can keep the
    lineage and activation invariants.
    """

    mrn: str | None = Field(None, min_length=1, max_length=255)  # 변경할 MRN (New MRN, optional)
    descs: list[DescIn] | None = None  # 전체 교체할 이름 목록 (Replacement names, optional)

    _check_descs = field_validator("descs")(_unique_langs)


class TreeNodeMove(BaseModel):
    """트리 노드 이동 요청 — 새 부모 UUID, 루트로 옮기려면 None."""

    parent_id: UUID | None = None


class TreeNodeActivate(BaseModel):
    """트리 노드 활성 상태 변경 요청 — Activation toggle request."""

    active: bool


class TreeNodeResponse(BaseModel):
    """트리 노드 응답 스키마.

    Tree node response schema.

    Attributes:
        id: 노드 UUID 문자열 (Node UUID as string)
        mrn: 자연키 (Natural key)
        parent_id: 부모 UUID 문자열 (Parent UUID as string, None for roots)
        active: 활성 상태 (Activation flag)
        lineage: 물질화 경로 (Materialized path)
        descs: 언어별 이름 (Localized names)
    """

    id: str
    mrn: str
    parent_id: str | None
    active: bool
    lineage: str | None
    descs: list[DescResponse]
    created_at: datetime
    updated_at: datetime


class ActivationResponse(BaseModel):
    """활성 상태 변경 결과 — Keys of every node whose flag changed."""

    changed: list[str]


class RebuildResponse(BaseModel):
    """lineage 재계산 결과 — Number of nodes whose lineage changed."""

    changed: int


# === 일괄 동기화 (Bulk sync) 스키마 ===

class TreeSyncItem(BaseModel):
    """트리 노드 동기화 후보 스키마.

    Tree node bulk-sync candidate. The parent is referenced by natural key and
    may be part of the same batch or already persisted.

    Attributes:
        mrn: 자연키 (Natural key)
        parent_mrn: 부모 자연키 (Parent natural key, None for roots)
        active: 활성 상태 (Activation flag)
        descs: 언어별 이름 (Localized names)
    """

    mrn: str = Field(..., min_length=1, max_length=255)
    parent_mrn: str | None = None
    active: bool = True
    descs: list[DescIn] = []

    _check_descs = field_validator("descs")(_unique_langs)

    def significant_fields(self) -> dict[str, Any]:
        return {
            "mrn": self.mrn,
            "active": self.active,
            "descs": desc_map(self.descs),
            "parent": self.parent_mrn,
        }
