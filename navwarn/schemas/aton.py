"""항로표지(AtoN) Pydantic 요청/응답 스키마 정의.

AtoN Pydantic request/response schema definitions.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class AtonTagIn(BaseModel):
    """항로표지 태그 입력 — AtoN key/value tag."""

    k: str = Field(..., min_length=1, max_length=255)  # 태그 키 (Tag key)
    v: str = Field(..., max_length=1000)  # 태그 값 (Tag value)


class AtonSyncItem(BaseModel):
    """항로표지 동기화 후보 스키마.

    AtoN bulk-sync candidate.

    Attributes:
        aton_uid: 자연키 (AtoN UID)
        lat: 위도 (Latitude)
        lon: 경도 (Longitude)
        tags: 태그 목록, 키는 유일 (Tags, unique per key)
    """

    aton_uid: str = Field(..., min_length=1, max_length=255)
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    tags: list[AtonTagIn] = []

    @field_validator("tags")
    @classmethod
    def check_unique_keys(cls, tags: list[AtonTagIn]) -> list[AtonTagIn]:
        keys = [tag.k for tag in tags]
        if len(keys) != len(set(keys)):
            raise ValueError("Duplicate tag key")
        return tags

    def tag_map(self) -> dict[str, str]:
        return {tag.k: tag.v for tag in self.tags}

    def significant_fields(self) -> dict[str, Any]:
        return {"lat": self.lat, "lon": self.lon, "tags": self.tag_map()}


class AtonResponse(BaseModel):
    """항로표지 응답 스키마 — AtoN response."""

    id: str
    aton_uid: str
    lat: float
    lon: float
    tags: dict[str, str]
