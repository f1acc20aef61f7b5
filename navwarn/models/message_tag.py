"""메시지 태그 관련 SQLAlchemy ORM 모델 정의.

Message tag SQLAlchemy ORM model definitions.
A message tag is a named collection of message UIDs. Temporary tags carry an
expiry date and are removed by the expired-tag cleanup.

Tables:
    - message_tags: 메시지 태그 (Message tags)
    - message_tag_messages: 태그에 속한 메시지 UID (Message UIDs per tag)
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from navwarn.database import Base


class MessageTag(Base):
    """메시지 태그 모델.

    Message tag model.

    Attributes:
        id: 고유 식별자 UUID
        tag_id: 외부 자연키 (Natural key)
        name: 태그 이름 (Display name, optional)
        tag_type: 태그 유형 private/domain/public/temp (Tag type)
        expiry_date: 만료 일시, temp 태그만 (Expiry timestamp, temp tags)
        version: 낙관적 동시성 카운터 (Optimistic concurrency counter)

    Relationships:
        messages: 태그된 메시지 UID 행 (Tagged message UID rows)
    """

    __tablename__ = "message_tags"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tag_id: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tag_type: Mapped[str] = mapped_column(String(20), nullable=False, default="private")
    expiry_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    messages = relationship("MessageTagMessage", back_populates="tag", cascade="all, delete-orphan", lazy="selectin", order_by="MessageTagMessage.message_uid")

    __mapper_args__ = {"version_id_col": version}

    @property
    def message_uids(self) -> list[str]:
        return [m.message_uid for m in self.messages]

    def significant_fields(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "tag_type": self.tag_type,
            "expiry_date": self.expiry_date,
            "message_uids": set(self.message_uids),
        }


class MessageTagMessage(Base):
    """태그에 속한 메시지 UID — Message UID member of a tag."""

    __tablename__ = "message_tag_messages"
    __table_args__ = (UniqueConstraint("tag_id", "message_uid", name="uq_message_tag_message"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tag_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("message_tags.id", ondelete="CASCADE"), nullable=False)
    message_uid: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    tag = relationship("MessageTag", back_populates="messages")
