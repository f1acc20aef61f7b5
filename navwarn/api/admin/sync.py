"""관리자 동기화 라우터 — 레코드 유형별 일괄 동기화 엔드포인트.

Admin Sync Router — Bulk synchronization endpoints per record type.
Each request is one synchronization pass. On an aborted pass the chunks
flushed before the failure are committed or rolled back according to
``SYNC_COMMIT_PARTIAL``; the ``StoreFailure`` handler reports the counts.
"""

from typing import Annotated, Awaitable

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.config import settings
from navwarn.core.errors import StoreFailure
from navwarn.core.sync import SyncResult
from navwarn.database import get_db
from navwarn.schemas.aton import AtonSyncItem
from navwarn.schemas.message_tag import MessageTagSyncItem
from navwarn.schemas.sync import SyncResultResponse
from navwarn.schemas.transmitter import TransmitterSyncItem
from navwarn.schemas.tree import TreeSyncItem
from navwarn.services.sync_service import sync_service

router: APIRouter = APIRouter()


async def _run_and_commit(db: AsyncSession, run: Awaitable[SyncResult]) -> SyncResultResponse:
    """동기화를 실행하고 트랜잭션을 마무리합니다 — Run a pass and settle the transaction."""
    try:
        result: SyncResult = await run
    except StoreFailure:
        if settings.SYNC_COMMIT_PARTIAL:
            await db.commit()
        else:
            await db.rollback()
        raise
    await db.commit()
    return SyncResultResponse.from_result(result)


@router.post("/areas", response_model=SyncResultResponse)
async def sync_areas(
    items: list[TreeSyncItem],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SyncResultResponse:
    """영역 트리를 동기화합니다 — Synchronize the area tree."""
    return await _run_and_commit(db, sync_service.sync_areas(db, items))


@router.post("/categories", response_model=SyncResultResponse)
async def sync_categories(
    items: list[TreeSyncItem],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SyncResultResponse:
    """카테고리 트리를 동기화합니다 — Synchronize the category tree."""
    return await _run_and_commit(db, sync_service.sync_categories(db, items))


@router.post("/atons", response_model=SyncResultResponse)
async def sync_atons(
    items: list[AtonSyncItem],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SyncResultResponse:
    """항로표지를 동기화합니다 — Synchronize AtoNs."""
    return await _run_and_commit(db, sync_service.sync_atons(db, items))


@router.post("/message-tags", response_model=SyncResultResponse)
async def sync_message_tags(
    items: list[MessageTagSyncItem],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SyncResultResponse:
    """메시지 태그를 동기화합니다 — Synchronize message tags."""
    return await _run_and_commit(db, sync_service.sync_message_tags(db, items))


@router.post("/transmitters", response_model=SyncResultResponse)
async def sync_transmitters(
    items: list[TransmitterSyncItem],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SyncResultResponse:
    """NAVTEX 송신소를 동기화합니다 — Synchronize NAVTEX transmitters."""
    return await _run_and_commit(db, sync_service.sync_transmitters(db, items))
