"""NAVTEX 송신소 레포지토리 — 영역 기반 송신소 조회.

NAVTEX Transmitter Repository — Transmitter lookups by area subtree.
"""

from typing import Sequence

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.models.area import Area
from navwarn.models.transmitter import NavtexTransmitter, navtex_transmitter_areas
from navwarn.repositories.base import BaseRepository


class TransmitterRepository(BaseRepository[NavtexTransmitter]):
    """NAVTEX 송신소 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리."""

    def __init__(self) -> None:
        super().__init__(NavtexTransmitter, "name")

    async def get_by_area_lineages(
        self,
        db: AsyncSession,
        lineages: Sequence[str],
        only_active: bool = True,
    ) -> list[NavtexTransmitter]:
        """영역 하위 트리 중 하나에 담당 영역이 있는 송신소를 조회합니다.

        Retrieve transmitters covering an area inside any of the given
        subtrees (``area.lineage LIKE 'lineage%'``). An empty lineage list
        applies no area restriction.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            lineages: 영역 하위 트리 루트의 lineage (Lineages of the subtree roots)
            only_active: 활성 송신소만 조회 (Restrict to active transmitters)

        Returns:
            list[NavtexTransmitter]: 이름 순 송신소 (Transmitters ordered by name)
        """
        query: Select = select(NavtexTransmitter)
        if only_active:
            query = query.where(NavtexTransmitter.active.is_(True))
        if lineages:
            query = (
                query.join(navtex_transmitter_areas, navtex_transmitter_areas.c.transmitter_id == NavtexTransmitter.id)
                .join(Area, Area.id == navtex_transmitter_areas.c.area_id)
                .where(or_(*(Area.lineage.startswith(lineage, autoescape=True) for lineage in lineages)))
            )
        result = await db.execute(query.order_by(NavtexTransmitter.name))
        return list(result.scalars().unique().all())


# 싱글턴 인스턴스 — Singleton instance
transmitter_repository: TransmitterRepository = TransmitterRepository()
