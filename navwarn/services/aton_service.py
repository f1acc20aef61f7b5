"""항로표지 서비스 — AtoN 조회.

AtoN Service — AtoN lookup by UID and by tag.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.models.aton import AtonNode
from navwarn.repositories.aton_repository import aton_repository
from navwarn.schemas.aton import AtonResponse
from navwarn.utils.exceptions import NotFoundError


class AtonService:
    """항로표지 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, aton: AtonNode) -> AtonResponse:
        return AtonResponse(
            id=str(aton.id),
            aton_uid=aton.aton_uid,
            lat=aton.lat,
            lon=aton.lon,
            tags=aton.tag_map(),
        )

    async def get_aton(self, db: AsyncSession, aton_uid: str) -> AtonResponse:
        """UID로 항로표지를 조회합니다.

        Raises:
            NotFoundError: 항로표지를 찾을 수 없을 때 (AtoN not found)
        """
        aton = await aton_repository.get_by_key(db, aton_uid)
        if aton is None:
            raise NotFoundError("AtoN not found")
        return self._to_response(aton)

    async def search(
        self,
        db: AsyncSession,
        tag_key: str | None = None,
        tag_value: str | None = None,
    ) -> list[AtonResponse]:
        """태그로 항로표지를 검색합니다. 태그 키가 없으면 전체 조회.

        Search AtoNs by tag key (and value); without a key, list all AtoNs.
        """
        if tag_key is None:
            atons = await aton_repository.get_all(db)
        else:
            atons = await aton_repository.get_by_tag(db, tag_key, tag_value)
        return [self._to_response(a) for a in atons]


# 싱글턴 인스턴스 — Singleton instance
aton_service: AtonService = AtonService()
