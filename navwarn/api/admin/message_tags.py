"""관리자 메시지 태그 라우터 — 태그 조회, 임시 태그, 만료 정리.

Admin Message Tag Router — Tag lookup, temporary tags and expired tag cleanup.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.database import get_db
from navwarn.schemas.message_tag import CleanupResponse, MessageTagResponse, TempTagCreate
from navwarn.services.message_tag_service import message_tag_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[MessageTagResponse])
async def list_tags(
    db: Annotated[AsyncSession, Depends(get_db)],
    message_uid: str | None = None,
) -> list[MessageTagResponse]:
    """태그 목록을 조회합니다 — List tags, optionally those containing a message."""
    return await message_tag_service.list_tags(db, message_uid=message_uid)


@router.post("/temp", response_model=MessageTagResponse, status_code=201)
async def create_temp_tag(
    data: TempTagCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageTagResponse:
    """임시 태그를 생성합니다 — Create a temporary tag."""
    result: MessageTagResponse = await message_tag_service.create_temp_tag(db, data.message_uids)
    await db.commit()
    return result


@router.delete("/expired", response_model=CleanupResponse)
async def remove_expired(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CleanupResponse:
    """만료된 태그를 삭제합니다 — Remove expired tags."""
    result: CleanupResponse = await message_tag_service.remove_expired(db)
    await db.commit()
    return result


@router.get("/{tag_id}", response_model=MessageTagResponse)
async def get_tag(
    tag_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageTagResponse:
    """태그를 조회합니다 — Retrieve a tag."""
    return await message_tag_service.get_tag(db, tag_id)
