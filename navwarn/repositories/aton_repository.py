"""항로표지 레포지토리 — AtoN 조회 쿼리.

AtoN Repository — Lookup queries for AtoN nodes and their tags.
"""

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.models.aton import AtonNode, AtonTag
from navwarn.repositories.base import BaseRepository


class AtonRepository(BaseRepository[AtonNode]):
    """항로표지 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리."""

    def __init__(self) -> None:
        super().__init__(AtonNode, "aton_uid")

    async def get_by_tag(
        self,
        db: AsyncSession,
        key: str,
        value: str | None = None,
    ) -> list[AtonNode]:
        """태그 키(와 값)로 항로표지를 조회합니다.

        Retrieve AtoNs carrying the tag ``key`` (with ``value`` when given).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            key: 태그 키 (Tag key)
            value: 태그 값, None이면 키만 비교 (Tag value, None matches any value)

        Returns:
            list[AtonNode]: AtoN UID 순 목록 (AtoNs ordered by UID)
        """
        query: Select = select(AtonNode).join(AtonTag, AtonTag.aton_id == AtonNode.id).where(AtonTag.k == key)
        if value is not None:
            query = query.where(AtonTag.v == value)
        result = await db.execute(query.order_by(AtonNode.aton_uid))
        return list(result.scalars().unique().all())


# 싱글턴 인스턴스 — Singleton instance
aton_repository: AtonRepository = AtonRepository()
