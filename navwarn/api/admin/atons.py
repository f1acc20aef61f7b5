"""관리자 항로표지 라우터 — AtoN 조회 엔드포인트.

Admin AtoN Router — AtoN lookup endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.database import get_db
from navwarn.schemas.aton import AtonResponse
from navwarn.services.aton_service import aton_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[AtonResponse])
async def search_atons(
    db: Annotated[AsyncSession, Depends(get_db)],
    tag_key: str | None = None,
    tag_value: str | None = None,
) -> list[AtonResponse]:
    """태그로 항로표지를 검색합니다 — Search AtoNs by tag."""
    return await aton_service.search(db, tag_key=tag_key, tag_value=tag_value)


@router.get("/{aton_uid}", response_model=AtonResponse)
async def get_aton(
    aton_uid: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AtonResponse:
    """UID로 항로표지를 조회합니다 — Retrieve an AtoN by UID."""
    return await aton_service.get_aton(db, aton_uid)
