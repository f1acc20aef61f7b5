"""트리 레포지토리 — 영역/카테고리 트리 쿼리.

Tree Repository — Queries for the area and category trees.
Subtree lookups use the materialized lineage: ``lineage LIKE 'prefix%'``
is an ancestor-or-self test because every key in a lineage is delimited.
"""

from typing import Generic
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.models.area import Area
from navwarn.models.category import Category
from navwarn.repositories.base import BaseRepository, ModelType


class TreeRepository(BaseRepository[ModelType], Generic[ModelType]):
    """영역/카테고리 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository for tree tables exposing ``mrn``, ``parent_id`` and ``lineage``.
    """

    def __init__(self, model: type[ModelType]) -> None:
        super().__init__(model, "mrn")

    async def load_all(
        self,
        db: AsyncSession,
        refresh: bool = False,
    ) -> list[ModelType]:
        """트리 전체 행을 조회합니다.

        Load every row of the tree, e.g. to build a ``TreeSnapshot``.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            refresh: True이면 세션의 객체 상태를 DB 값으로 덮어씀
                     (Overwrite identity-map state with database values)

        Returns:
            list[ModelType]: 모든 노드 (All nodes by lineage, parents before descendants)
        """
        query: Select = select(self.model).order_by(self.model.lineage, self.model.mrn)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_subtree(
        self,
        db: AsyncSession,
        lineage: str,
    ) -> list[ModelType]:
        """lineage 접두사로 하위 트리(자기 자신 포함)를 조회합니다.

        Retrieve the node with the given lineage and all its descendants.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            lineage: 하위 트리 루트의 lineage (Lineage of the subtree root)

        Returns:
            list[ModelType]: 하위 트리 노드, lineage 순 (Subtree nodes ordered by lineage)
        """
        query: Select = (
            select(self.model)
            .where(self.model.lineage.startswith(lineage, autoescape=True))
            .order_by(self.model.lineage)
        )
        result = await db.execute(query)
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instances
area_repository: TreeRepository[Area] = TreeRepository(Area)
category_repository: TreeRepository[Category] = TreeRepository(Category)
