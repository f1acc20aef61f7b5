"""메시지 태그 레포지토리 — 메시지 태그 조회 및 만료 쿼리.

Message Tag Repository — Lookup and expiry queries for message tags.
"""

from datetime import datetime

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.models.message_tag import MessageTag, MessageTagMessage
from navwarn.repositories.base import BaseRepository


class MessageTagRepository(BaseRepository[MessageTag]):
    """메시지 태그 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리."""

    def __init__(self) -> None:
        super().__init__(MessageTag, "tag_id")

    async def get_expired(
        self,
        db: AsyncSession,
        now: datetime,
    ) -> list[MessageTag]:
        """만료 일시가 지난 태그를 조회합니다.

        Retrieve tags whose expiry date lies before ``now``.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            now: 기준 시각 UTC (Reference time in UTC)

        Returns:
            list[MessageTag]: 만료된 태그 (Expired tags)
        """
        query: Select = (
            select(MessageTag)
            .where(MessageTag.expiry_date.is_not(None), MessageTag.expiry_date < now)
            .order_by(MessageTag.expiry_date)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_by_message_uid(
        self,
        db: AsyncSession,
        message_uid: str,
    ) -> list[MessageTag]:
        """메시지가 속한 태그를 조회합니다 — Tags containing the given message."""
        query: Select = (
            select(MessageTag)
            .join(MessageTagMessage, MessageTagMessage.tag_id == MessageTag.id)
            .where(MessageTagMessage.message_uid == message_uid)
            .order_by(MessageTag.tag_id)
        )
        result = await db.execute(query)
        return list(result.scalars().unique().all())


# 싱글턴 인스턴스 — Singleton instance
message_tag_repository: MessageTagRepository = MessageTagRepository()
