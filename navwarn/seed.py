"""초기 데이터 시드 스크립트 — 샘플 영역/카테고리 트리와 NAVTEX 송신소 생성.

Seed script — Creates a sample area tree, category tree and NAVTEX
transmitters. The data goes through the bulk synchronizer, so running the
script again reports everything as unchanged.

Usage:
    python -m navwarn.seed

Creates:
    - 영역: 덴마크 해역 → 카테가트/발트해 (Danish waters → Kattegat / Baltic Sea)
    - 카테고리: 항로표지 → 부표/등대 (Aids to navigation → Buoys / Lighthouses)
    - NAVTEX 송신소 2개 (2 NAVTEX transmitters)
"""

import asyncio

from navwarn.database import Base, async_session, engine
from navwarn.models import *  # noqa: F401,F403 — register all models with metadata
from navwarn.schemas.transmitter import TransmitterSyncItem
from navwarn.schemas.tree import DescIn, TreeSyncItem
from navwarn.services.sync_service import sync_service

_AREA = "urn:mrn:iho:area:dk"
_CATEGORY = "urn:mrn:iho:category:aton"


def _item(mrn: str, parent_mrn: str | None, en: str, da: str) -> TreeSyncItem:
    return TreeSyncItem(
        mrn=mrn,
        parent_mrn=parent_mrn,
        descs=[DescIn(lang="en", name=en), DescIn(lang="da", name=da)],
    )


async def seed() -> None:
    """데이터베이스를 샘플 데이터로 시드합니다.

    Seed the database with sample data.
    Creates tables if they don't exist, then synchronizes the sample data.
    """
    # 테이블 생성 — DDL 실행 (Create all tables from ORM metadata)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    areas = [
        _item(_AREA, None, "Danish Waters", "Danske farvande"),
        _item(f"{_AREA}:kattegat", _AREA, "Kattegat", "Kattegat"),
        _item(f"{_AREA}:kattegat:north", f"{_AREA}:kattegat", "Northern Kattegat", "Nordlige Kattegat"),
        _item(f"{_AREA}:baltic", _AREA, "The Baltic Sea", "Østersøen"),
        _item(f"{_AREA}:baltic:bornholm", f"{_AREA}:baltic", "Waters around Bornholm", "Farvandet omkring Bornholm"),
    ]
    categories = [
        _item(_CATEGORY, None, "Aids to Navigation", "Navigationshjælpemidler"),
        _item(f"{_CATEGORY}:buoys", _CATEGORY, "Buoys", "Bøjer"),
        _item(f"{_CATEGORY}:lighthouses", _CATEGORY, "Lighthouses", "Fyr"),
    ]
    transmitters = [
        TransmitterSyncItem(name="Skagen", areas=[f"{_AREA}:kattegat"]),
        TransmitterSyncItem(name="Rønne", areas=[f"{_AREA}:baltic:bornholm"]),
    ]

    async with async_session() as db:
        area_result = await sync_service.sync_areas(db, areas)
        category_result = await sync_service.sync_categories(db, categories)
        transmitter_result = await sync_service.sync_transmitters(db, transmitters)
        await db.commit()

    for label, result in (("areas", area_result), ("categories", category_result), ("transmitters", transmitter_result)):
        print(f"Seeded {label}: created={result.created}, updated={result.updated}, unchanged={result.unchanged}")


if __name__ == "__main__":
    asyncio.run(seed())
