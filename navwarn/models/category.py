"""카테고리(Category) 관련 SQLAlchemy ORM 모델 정의.

Category-related SQLAlchemy ORM model definitions.
Categories classify navigational warnings (e.g. "Aids to Navigation" →
"Buoys") and share the area tree layout: ``parent_id`` + ``lineage``.

Tables:
    - categories: 카테고리 트리 노드 (Category tree nodes)
    - category_descs: 언어별 카테고리 이름 (Localized category names)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from navwarn.database import Base


class Category(Base):
    """카테고리 모델 — 메시지 분류 트리의 노드.

    Category model — Node of the message category tree.

    Attributes:
        id: 고유 식별자 UUID (Immutable node key)
        mrn: 외부 자연키 (Natural key for bulk sync)
        parent_id: 부모 카테고리 FK (Parent category, None for roots)
        active: 활성 상태 (Activation flag)
        lineage: 물질화 경로 (Materialized path, derived)
        version: 낙관적 동시성 카운터 (Optimistic concurrency counter)
    """

    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    mrn: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    parent_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=True, index=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    lineage: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    descs = relationship("CategoryDesc", back_populates="category", cascade="all, delete-orphan", lazy="selectin", order_by="CategoryDesc.lang")

    __mapper_args__ = {"version_id_col": version}


class CategoryDesc(Base):
    """카테고리 언어별 이름 모델 — Localized category name."""

    __tablename__ = "category_descs"
    __table_args__ = (UniqueConstraint("category_id", "lang", name="uq_category_desc_lang"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    category_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    lang: Mapped[str] = mapped_column(String(8), nullable=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)

    category = relationship("Category", back_populates="descs")
