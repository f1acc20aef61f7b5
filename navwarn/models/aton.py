"""항로표지(AtoN) 관련 SQLAlchemy ORM 모델 정의.

Aid-to-Navigation (AtoN) SQLAlchemy ORM model definitions.
AtoNs are imported in bulk (OSM-style nodes with key/value tags) and
reconciled by ``aton_uid``.

Tables:
    - aton_nodes: 항로표지 노드 (AtoN nodes with position)
    - aton_tags: 항로표지 태그 key/value (AtoN tags)
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from navwarn.database import Base


class AtonNode(Base):
    """항로표지 노드 모델.

    AtoN node model.

    Attributes:
        id: 고유 식별자 UUID
        aton_uid: 외부 자연키 (AtoN UID, natural key)
        lat: 위도 (Latitude)
        lon: 경도 (Longitude)
        version: 낙관적 동시성 카운터 (Optimistic concurrency counter)

    Relationships:
        tags: key/value 태그 목록 (Key/value tags, unique per key)
    """

    __tablename__ = "aton_nodes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    aton_uid: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lon: Mapped[float] = mapped_column(Float, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    tags = relationship("AtonTag", back_populates="aton", cascade="all, delete-orphan", lazy="selectin", order_by="AtonTag.k")

    __mapper_args__ = {"version_id_col": version}

    def tag_map(self) -> dict[str, str]:
        return {tag.k: tag.v for tag in self.tags}

    def significant_fields(self) -> dict[str, Any]:
        return {"lat": self.lat, "lon": self.lon, "tags": self.tag_map()}


class AtonTag(Base):
    """항로표지 태그 모델 — AtoN key/value tag."""

    __tablename__ = "aton_tags"
    __table_args__ = (UniqueConstraint("aton_id", "k", name="uq_aton_tag_key"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    aton_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("aton_nodes.id", ondelete="CASCADE"), nullable=False)
    # 태그 키 — Tag key, e.g. "seamark:type"
    k: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # 태그 값 — Tag value, e.g. "buoy_lateral"
    v: Mapped[str] = mapped_column(String(1000), nullable=False)

    aton = relationship("AtonNode", back_populates="tags")
