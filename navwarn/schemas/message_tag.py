"""메시지 태그 Pydantic 요청/응답 스키마 정의.

Message tag Pydantic request/response schema definitions.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class MessageTagSyncItem(BaseModel):
    """메시지 태그 동기화 후보 스키마.

    Message tag bulk-sync candidate.

    Attributes:
        tag_id: 자연키 (Natural key)
        name: 태그 이름 (Display name, optional)
        tag_type: 태그 유형 (private / domain / public / temp)
        expiry_date: 만료 일시 (Expiry timestamp, optional)
        message_uids: 태그된 메시지 UID (Tagged message UIDs, order irrelevant)
    """

    tag_id: str = Field(..., min_length=1, max_length=128)
    name: str | None = None
    tag_type: Literal["private", "domain", "public", "temp"] = "private"
    expiry_date: datetime | None = None
    message_uids: list[str] = []

    def significant_fields(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "tag_type": self.tag_type,
            "expiry_date": self.expiry_date,
            "message_uids": set(self.message_uids),
        }


class TempTagCreate(BaseModel):
    """임시 태그 생성 요청 — Messages to put in a temporary tag."""

    message_uids: list[str] = Field(..., min_length=1)


class MessageTagResponse(BaseModel):
    """메시지 태그 응답 스키마 — Message tag response."""

    id: str
    tag_id: str
    name: str | None
    tag_type: str
    expiry_date: datetime | None
    message_uids: list[str]


class CleanupResponse(BaseModel):
    """만료 태그 정리 결과 — Number of expired tags removed."""

    removed: int
