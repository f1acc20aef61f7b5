"""NAVTEX 송신소 Pydantic 요청/응답 스키마 정의.

NAVTEX transmitter Pydantic request/response schema definitions.
"""

from typing import Any

from pydantic import BaseModel, Field


class TransmitterSyncItem(BaseModel):
    """송신소 동기화 후보 스키마.

    NAVTEX transmitter bulk-sync candidate. Areas are referenced by MRN and
    must already exist.

    Attributes:
        name: 송신소 이름, 자연키 (Transmitter name, natural key)
        active: 활성 상태 (Active flag)
        areas: 담당 영역 MRN (Covered area MRNs)
    """

    name: str = Field(..., min_length=1, max_length=255)
    active: bool = True
    areas: list[str] = []

    def significant_fields(self) -> dict[str, Any]:
        return {"active": self.active, "areas": set(self.areas)}


class TransmitterResponse(BaseModel):
    """송신소 응답 스키마 — Transmitter response."""

    id: str
    name: str
    active: bool
    areas: list[str]  # 담당 영역 MRN (Covered area MRNs)


class NavtexSelectionRequest(BaseModel):
    """NAVTEX 송신소 선택 요청 — Message areas to select transmitters for."""

    area_mrns: list[str] = []


class TransmitterSelection(BaseModel):
    """송신소 선택 상태 — Transmitter with its selection flag."""

    name: str
    selected: bool
