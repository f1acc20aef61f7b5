"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite DB, session, and httpx client fixtures.
Each test gets a fresh in-memory database (aiosqlite on a StaticPool) with
the schema created from the ORM metadata. SQLite's driver-level transaction
handling is replaced with explicit BEGIN so SAVEPOINTs behave as they do on
PostgreSQL.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from navwarn.database import Base, get_db
from navwarn.main import app
from navwarn.models import *  # noqa: F401,F403 — register all models with metadata
from navwarn.schemas.transmitter import TransmitterSyncItem
from navwarn.schemas.tree import DescIn, TreeSyncItem
from navwarn.services.sync_service import sync_service

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = "sqlite+aiosqlite://"

AREA = "urn:mrn:test:area"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 매 테스트마다 스키마를 새로 생성합니다."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # SAVEPOINT 지원 — pysqlite 자동 트랜잭션 비활성화 후 BEGIN 직접 발행
    @event.listens_for(eng.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(eng.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
def area_item(mrn: str, parent_mrn: str | None = None, active: bool = True, name: str | None = None) -> TreeSyncItem:
    """영역 동기화 후보를 만듭니다 — Build an area sync candidate."""
    return TreeSyncItem(
        mrn=mrn,
        parent_mrn=parent_mrn,
        active=active,
        descs=[DescIn(lang="en", name=name or mrn.rsplit(":", 1)[-1])],
    )


@pytest_asyncio.fixture
async def areas(db: AsyncSession) -> dict[str, Any]:
    """샘플 영역 트리를 생성합니다.

    root
    ├── north
    │   └── north:skagen
    └── south
    """
    from navwarn.models.area import Area
    from navwarn.repositories.tree_repository import area_repository

    await sync_service.sync_areas(db, [
        area_item(AREA),
        area_item(f"{AREA}:north", AREA),
        area_item(f"{AREA}:north:skagen", f"{AREA}:north"),
        area_item(f"{AREA}:south", AREA),
    ])
    await db.commit()
    rows: list[Area] = await area_repository.load_all(db)
    return {row.mrn: row for row in rows}


@pytest_asyncio.fixture
async def transmitters(db: AsyncSession, areas) -> None:
    """영역 트리에 연결된 NAVTEX 송신소를 생성합니다."""
    await sync_service.sync_transmitters(db, [
        TransmitterSyncItem(name="Skagen", areas=[f"{AREA}:north:skagen"]),
        TransmitterSyncItem(name="South", areas=[f"{AREA}:south"]),
        TransmitterSyncItem(name="Retired", active=False, areas=[f"{AREA}:north"]),
    ])
    await db.commit()
