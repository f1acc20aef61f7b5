"""관리자 NAVTEX 송신소 라우터 — 송신소 조회 및 선택 엔드포인트.

Admin NAVTEX Transmitter Router — Transmitter lookup and selection endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.database import get_db
from navwarn.schemas.transmitter import NavtexSelectionRequest, TransmitterResponse, TransmitterSelection
from navwarn.services.transmitter_service import transmitter_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[TransmitterResponse])
async def list_transmitters(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[TransmitterResponse]:
    """송신소 목록을 조회합니다 — List transmitters."""
    return await transmitter_service.list_transmitters(db)


@router.get("/by-area", response_model=list[TransmitterResponse])
async def find_by_areas(
    db: Annotated[AsyncSession, Depends(get_db)],
    area: Annotated[list[str], Query()] = [],
    only_active: bool = True,
) -> list[TransmitterResponse]:
    """영역 하위 트리를 담당하는 송신소를 조회합니다.

    Find transmitters covering an area inside any of the given areas (MRNs).
    """
    return await transmitter_service.find_by_areas(db, area, only_active=only_active)


@router.post("/navtex-selection", response_model=list[TransmitterSelection])
async def navtex_selection(
    data: NavtexSelectionRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[TransmitterSelection]:
    """메시지 영역에 대한 송신소 선택 상태를 계산합니다.

    Compute the NAVTEX transmitter selection for the message areas.
    """
    return await transmitter_service.navtex_selection(db, data.area_mrns)


@router.get("/{name}", response_model=TransmitterResponse)
async def get_transmitter(
    name: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TransmitterResponse:
    """이름으로 송신소를 조회합니다 — Retrieve a transmitter by name."""
    return await transmitter_service.get_transmitter(db, name)
