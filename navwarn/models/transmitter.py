"""NAVTEX 송신소 SQLAlchemy ORM 모델 정의.

NAVTEX transmitter SQLAlchemy ORM model definitions.
A transmitter covers a set of areas; a message is promulgated by every
transmitter with an area inside one of the message's areas.

Tables:
    - navtex_transmitters: NAVTEX 송신소 (NAVTEX transmitters)
    - navtex_transmitter_areas: 송신소-영역 매핑 (Transmitter ↔ area association)
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from navwarn.database import Base

# 송신소-영역 연관 테이블 — Transmitter ↔ area association table
navtex_transmitter_areas: Table = Table(
    "navtex_transmitter_areas",
    Base.metadata,
    Column("transmitter_id", Uuid, ForeignKey("navtex_transmitters.id", ondelete="CASCADE"), primary_key=True),
    Column("area_id", Uuid, ForeignKey("areas.id", ondelete="CASCADE"), primary_key=True),
)


class NavtexTransmitter(Base):
    """NAVTEX 송신소 모델.

    NAVTEX transmitter model.

    Attributes:
        id: 고유 식별자 UUID
        name: 송신소 이름, 자연키 (Transmitter name, natural key)
        active: 활성 상태 (Active flag)
        version: 낙관적 동시성 카운터 (Optimistic concurrency counter)

    Relationships:
        areas: 담당 영역 (Covered areas)
    """

    __tablename__ = "navtex_transmitters"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    areas = relationship("Area", secondary=navtex_transmitter_areas, lazy="selectin", order_by="Area.mrn")

    __mapper_args__ = {"version_id_col": version}

    @property
    def region_lineages(self) -> list[str]:
        """담당 영역의 lineage 목록 — Lineages of the covered areas."""
        return [area.lineage for area in self.areas if area.lineage]

    def significant_fields(self) -> dict[str, Any]:
        return {"active": self.active, "areas": {area.mrn for area in self.areas}}
