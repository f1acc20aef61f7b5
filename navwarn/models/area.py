"""영역(Area) 관련 SQLAlchemy ORM 모델 정의.

Area-related SQLAlchemy ORM model definitions.
Areas form a tree (sea → sub-area → ...) addressed by MRN. The tree is stored
as a plain ``parent_id`` column plus a materialized ``lineage`` path; parent
and child navigation is done by the engine's in-memory arena, not by ORM
relationships.

Tables:
    - areas: 영역 트리 노드 (Area tree nodes)
    - area_descs: 언어별 영역 이름 (Localized area names)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from navwarn.database import Base


class Area(Base):
    """영역 모델 — 해역 계층 트리의 노드.

    Area model — Node of the geographic area tree.

    Attributes:
        id: 고유 식별자 UUID (Immutable node key)
        mrn: 외부 자연키 (Maritime Resource Name, natural key for bulk sync)
        parent_id: 부모 영역 FK, 루트면 None (Parent area, None for roots)
        active: 활성 상태 (Activation flag, cascaded by the engine)
        lineage: 물질화 경로 ``/root-id/.../id/`` (Materialized path, derived)
        version: 낙관적 동시성 카운터 (Optimistic concurrency counter)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Relationships:
        descs: 언어별 이름 (Localized names, one per language)
    """

    __tablename__ = "areas"

    # 영역 고유 식별자 — Area unique identifier (UUID v4)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # MRN — Natural key, e.g. "urn:mrn:iho:area:dk:kattegat"
    mrn: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    # 부모 영역 FK — Parent area (RESTRICT: 자식이 있으면 삭제 불가)
    parent_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("areas.id", ondelete="RESTRICT"), nullable=True, index=True)
    # 활성 상태 — Active flag
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 물질화 경로 — Materialized path, prefix-searched with LIKE 'lineage%'
    lineage: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    # 버전 — Optimistic concurrency counter
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships (selectin: 비동기 세션에서 지연 로딩 방지)
    descs = relationship("AreaDesc", back_populates="area", cascade="all, delete-orphan", lazy="selectin", order_by="AreaDesc.lang")

    __mapper_args__ = {"version_id_col": version}


class AreaDesc(Base):
    """영역 언어별 이름 모델.

    Localized area name. At most one row per (area, language).

    Attributes:
        id: 고유 식별자 UUID
        area_id: 소속 영역 FK
        lang: 언어 코드 (e.g. "en", "da")
        name: 영역 이름 (Localized name)
    """

    __tablename__ = "area_descs"
    __table_args__ = (UniqueConstraint("area_id", "lang", name="uq_area_desc_lang"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    area_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("areas.id", ondelete="CASCADE"), nullable=False)
    lang: Mapped[str] = mapped_column(String(8), nullable=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)

    area = relationship("Area", back_populates="descs")
