"""기본 CRUD 레포지토리 — 모든 레포지토리의 부모 클래스.

Base CRUD Repository — Parent class for all domain repositories.
Provides generic create and read operations and lookups by the
model's natural key column.

Usage:
    class AtonRepository(BaseRepository[AtonNode]):
        def __init__(self) -> None:
            super().__init__(AtonNode, "aton_uid")
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.database import Base

# 제네릭 타입 변수 — SQLAlchemy 모델을 나타냄
# Generic type variable representing a SQLAlchemy model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """제네릭 CRUD 레포지토리.

    Generic CRUD repository providing common database operations.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
        key_column: 자연키 컬럼 이름 (Name of the natural key column)
    """

    def __init__(self, model: type[ModelType], key_column: str) -> None:
        """레포지토리를 초기화합니다.

        Initialize the repository with a model class.

        Args:
            model: 이 레포지토리가 관리할 SQLAlchemy 모델 클래스
                   (SQLAlchemy model class this repository manages)
            key_column: 자연키 컬럼 이름 (Natural key column name)
        """
        self.model: type[ModelType] = model
        self.key_column: str = key_column

    @property
    def key(self) -> Any:
        return getattr(self.model, self.key_column)

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
    ) -> ModelType | None:
        """ID로 단일 레코드를 조회합니다.

        Retrieve a single record by its UUID.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 조회할 레코드의 UUID (UUID of the record to retrieve)

        Returns:
            ModelType | None: 조회된 레코드 또는 None (Found record or None)
        """
        query: Select = select(self.model).where(self.model.id == record_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_key(
        self,
        db: AsyncSession,
        key: str,
    ) -> ModelType | None:
        """자연키로 단일 레코드를 조회합니다.

        Retrieve a single record by its natural key.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            key: 자연키 값 (Natural key value)

        Returns:
            ModelType | None: 조회된 레코드 또는 None (Found record or None)
        """
        query: Select = select(self.model).where(self.key == key)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_keys(
        self,
        db: AsyncSession,
        keys: Sequence[str],
    ) -> list[ModelType]:
        """여러 자연키로 레코드를 조회합니다 — Retrieve records by natural keys."""
        if not keys:
            return []
        query: Select = select(self.model).where(self.key.in_(list(keys))).order_by(self.key)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_by_key_prefix(
        self,
        db: AsyncSession,
        prefix: str,
    ) -> list[ModelType]:
        """자연키 접두사로 레코드를 조회합니다 — Retrieve records whose natural key starts with ``prefix``."""
        query: Select = select(self.model).where(self.key.startswith(prefix, autoescape=True)).order_by(self.key)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_all(
        self,
        db: AsyncSession,
        filters: dict[str, Any] | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelType]:
        """조건에 맞는 모든 레코드를 조회합니다.

        Retrieve all records matching the given filters.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            filters: 추가 필터 딕셔너리 {'컬럼명': 값}
                     (Additional filter dict {'column_name': value})
            order_by: 정렬 기준 컬럼, 기본은 자연키 (Column to order by, natural key by default)

        Returns:
            Sequence[ModelType]: 조회된 레코드 목록 (List of matching records)
        """
        query: Select = select(self.model)

        # 동적 필터 적용 — Dynamic filter application
        if filters:
            for column_name, value in filters.items():
                if hasattr(self.model, column_name) and value is not None:
                    query = query.where(getattr(self.model, column_name) == value)

        query = query.order_by(order_by if order_by is not None else self.key)
        result = await db.execute(query)
        return result.scalars().all()

    async def create(
        self,
        db: AsyncSession,
        obj_data: dict[str, Any],
    ) -> ModelType:
        """새 레코드를 생성합니다.

        Create a new record in the database.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            obj_data: 생성할 레코드의 데이터 딕셔너리
                      (Dictionary of data for the new record)

        Returns:
            ModelType: 생성된 레코드 (The created record)
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        return db_obj

    async def exists(
        self,
        db: AsyncSession,
        filters: dict[str, Any],
    ) -> bool:
        """주어진 조건에 일치하는 레코드가 존재하는지 확인합니다.

        Check if a record matching the given filters exists.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            filters: 검색 조건 딕셔너리 (Filter criteria dictionary)

        Returns:
            bool: 레코드 존재 여부 (Whether a matching record exists)
        """
        query: Select = select(func.count()).select_from(self.model)
        for column_name, value in filters.items():
            if hasattr(self.model, column_name):
                query = query.where(getattr(self.model, column_name) == value)

        count: int = (await db.execute(query)).scalar() or 0
        return count > 0
