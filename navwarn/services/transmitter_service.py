"""NAVTEX 송신소 서비스 — 영역 기반 송신소 조회 및 선택.

Transmitter Service — Area-based NAVTEX transmitter lookup and selection.
A transmitter is relevant for a message when one of its areas lies in the
subtree of one of the message areas. The database lookup uses the lineage
prefix query; the selection map uses ``SubtreeMatcher`` on loaded rows.
"""

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.core.errors import UnknownNode
from navwarn.core.matching import SubtreeMatcher, lineage_of
from navwarn.models.area import Area
from navwarn.models.transmitter import NavtexTransmitter
from navwarn.repositories.transmitter_repository import transmitter_repository
from navwarn.repositories.tree_repository import area_repository
from navwarn.schemas.transmitter import TransmitterResponse, TransmitterSelection
from navwarn.utils.exceptions import NotFoundError


class TransmitterService:
    """NAVTEX 송신소 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, transmitter: NavtexTransmitter) -> TransmitterResponse:
        return TransmitterResponse(
            id=str(transmitter.id),
            name=transmitter.name,
            active=transmitter.active,
            areas=[area.mrn for area in transmitter.areas],
        )

    async def _areas(self, db: AsyncSession, area_mrns: Sequence[str]) -> list[Area]:
        areas = await area_repository.get_by_keys(db, list(dict.fromkeys(area_mrns)))
        found = {area.mrn for area in areas}
        for mrn in area_mrns:
            if mrn not in found:
                raise UnknownNode(mrn)
        return areas

    async def list_transmitters(self, db: AsyncSession) -> list[TransmitterResponse]:
        """송신소 전체를 이름 순으로 조회합니다 — List all transmitters by name."""
        transmitters = await transmitter_repository.get_all(db)
        return [self._to_response(t) for t in transmitters]

    async def get_transmitter(self, db: AsyncSession, name: str) -> TransmitterResponse:
        """이름으로 송신소를 조회합니다.

        Raises:
            NotFoundError: 송신소를 찾을 수 없을 때 (Transmitter not found)
        """
        transmitter = await transmitter_repository.get_by_key(db, name)
        if transmitter is None:
            raise NotFoundError("Transmitter not found")
        return self._to_response(transmitter)

    async def find_by_areas(
        self,
        db: AsyncSession,
        area_mrns: Sequence[str],
        only_active: bool = True,
    ) -> list[TransmitterResponse]:
        """영역 하위 트리에 담당 영역이 있는 송신소를 조회합니다.

        Find transmitters covering an area inside the subtree of any of the
        given areas. No areas means no area restriction.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            area_mrns: 메시지 영역 MRN (Message area MRNs)
            only_active: 활성 송신소만 (Only active transmitters)

        Raises:
            UnknownNode: 존재하지 않는 영역 MRN (Unknown area MRN)
        """
        areas = await self._areas(db, area_mrns)
        transmitters = await transmitter_repository.get_by_area_lineages(
            db, [lineage_of(area) for area in areas], only_active=only_active
        )
        return [self._to_response(t) for t in transmitters]

    async def navtex_selection(
        self,
        db: AsyncSession,
        area_mrns: Sequence[str],
    ) -> list[TransmitterSelection]:
        """메시지 영역에 대한 NAVTEX 송신소 선택 상태를 계산합니다.

        Build the NAVTEX selection for a message: every active transmitter is
        listed, unselected by default; those covering an area inside one of
        the message areas are selected. A message without areas selects none.

        Raises:
            UnknownNode: 존재하지 않는 영역 MRN (Unknown area MRN)
        """
        areas = await self._areas(db, area_mrns)
        transmitters = await transmitter_repository.get_all(db, filters={"active": True})
        matcher = SubtreeMatcher(areas)
        return [
            TransmitterSelection(name=t.name, selected=bool(areas) and matcher.matches(t))
            for t in transmitters
        ]


# 싱글턴 인스턴스 — Singleton instance
transmitter_service: TransmitterService = TransmitterService()
