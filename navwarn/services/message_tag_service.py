"""메시지 태그 서비스 — 태그 조회, 임시 태그, 만료 태그 정리.

Message Tag Service — Tag lookup, temporary tags and expired tag cleanup.
"""

import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.config import settings
from navwarn.models.message_tag import MessageTag, MessageTagMessage
from navwarn.repositories.message_tag_repository import message_tag_repository
from navwarn.schemas.message_tag import CleanupResponse, MessageTagResponse
from navwarn.utils.exceptions import NotFoundError
from navwarn.utils.logger import get_logger

logger = get_logger(__name__)


class MessageTagService:
    """메시지 태그 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, tag: MessageTag) -> MessageTagResponse:
        return MessageTagResponse(
            id=str(tag.id),
            tag_id=tag.tag_id,
            name=tag.name,
            tag_type=tag.tag_type,
            expiry_date=tag.expiry_date,
            message_uids=tag.message_uids,
        )

    async def list_tags(self, db: AsyncSession, message_uid: str | None = None) -> list[MessageTagResponse]:
        """태그 목록을 조회합니다. message_uid가 있으면 해당 메시지가 속한 태그만.

        List tags, optionally only those containing ``message_uid``.
        """
        if message_uid is not None:
            tags = await message_tag_repository.get_by_message_uid(db, message_uid)
        else:
            tags = await message_tag_repository.get_all(db)
        return [self._to_response(t) for t in tags]

    async def get_tag(self, db: AsyncSession, tag_id: str) -> MessageTagResponse:
        """태그를 조회합니다.

        Raises:
            NotFoundError: 태그를 찾을 수 없을 때 (Tag not found)
        """
        tag = await message_tag_repository.get_by_key(db, tag_id)
        if tag is None:
            raise NotFoundError("Message tag not found")
        return self._to_response(tag)

    async def create_temp_tag(self, db: AsyncSession, message_uids: list[str]) -> MessageTagResponse:
        """임시 태그를 생성합니다.

        Create a temporary tag for the given messages. It expires after
        ``TEMP_TAG_EXPIRY_MINUTES`` and is then removed by the cleanup.
        """
        expiry = datetime.now(timezone.utc) + timedelta(minutes=settings.TEMP_TAG_EXPIRY_MINUTES)
        tag = await message_tag_repository.create(
            db,
            {
                "id": uuid.uuid4(),
                "tag_id": str(uuid.uuid4()),
                "tag_type": "temp",
                "expiry_date": expiry,
                "messages": [MessageTagMessage(message_uid=uid) for uid in dict.fromkeys(message_uids)],
            },
        )
        return self._to_response(tag)

    async def remove_expired(self, db: AsyncSession, now: datetime | None = None) -> CleanupResponse:
        """만료된 태그를 삭제합니다.

        Delete every tag whose expiry date has passed.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            now: 기준 시각, 기본은 현재 UTC (Reference time, defaults to now in UTC)

        Returns:
            CleanupResponse: 삭제된 태그 수 (Number of removed tags)
        """
        now = now or datetime.now(timezone.utc)
        expired = await message_tag_repository.get_expired(db, now)
        for tag in expired:
            await db.delete(tag)
        await db.flush()
        if expired:
            logger.info("Removed %d expired message tags", len(expired))
        return CleanupResponse(removed=len(expired))


# 싱글턴 인스턴스 — Singleton instance
message_tag_service: MessageTagService = MessageTagService()
