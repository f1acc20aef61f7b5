"""영역/카테고리 트리 서비스 — 트리 편집 비즈니스 로직.

Tree Service — Business logic for the area and category trees.
Every mutation loads the tree into a ``TreeSnapshot``, applies the change
through ``TreeEditor`` (which keeps lineage and activation consistent) and
writes the modified nodes back to their rows within the same transaction.
"""

import uuid
from typing import Any, Callable, Generic, Mapping
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.core.editor import TreeEditor
from navwarn.core.matching import lineage_of
from navwarn.core.tree import TreeNode, TreeSnapshot, desc_map
from navwarn.models.area import AreaDesc
from navwarn.models.category import CategoryDesc
from navwarn.repositories.base import ModelType
from navwarn.repositories.tree_repository import TreeRepository, area_repository, category_repository
from navwarn.schemas.tree import (
    ActivationResponse,
    DescResponse,
    RebuildResponse,
    TreeNodeCreate,
    TreeNodeResponse,
    TreeNodeUpdate,
)
from navwarn.utils.exceptions import DuplicateError, NotFoundError
from navwarn.utils.logger import get_logger

logger = get_logger(__name__)


def replace_children(
    collection: list[Any],
    wanted: Mapping[str, Any],
    key_attr: str,
    value_attr: str | None,
    factory: Callable[[str, Any], Any],
) -> bool:
    """자식 행 컬렉션을 원하는 key → value 상태로 맞춥니다.

    Bring a child-row collection to the wanted ``{key: value}`` state in
    place: rows with an unwanted key are removed, rows with a wanted key are
    updated, missing keys are created with ``factory(key, value)``. Existing
    rows are never deleted and re-inserted, so per-parent unique constraints
    on the key hold during the flush.

    Returns:
        bool: 변경 여부 (Whether anything changed)
    """
    changed = False
    existing = {getattr(child, key_attr): child for child in collection}
    for key, child in existing.items():
        if key not in wanted:
            collection.remove(child)
            changed = True
    for key, value in wanted.items():
        child = existing.get(key)
        if child is None:
            collection.append(factory(key, value))
            changed = True
        elif value_attr is not None and getattr(child, value_attr) != value:
            setattr(child, value_attr, value)
            changed = True
    return changed


class TreeState(Generic[ModelType]):
    """한 트랜잭션 동안의 트리 상태 — rows, snapshot, editor.

    One operation's view of a tree: the persisted rows by id and by MRN, the
    arena built from them and the editor working on that arena.
    """

    def __init__(self, repository: TreeRepository[ModelType]) -> None:
        self.repository: TreeRepository[ModelType] = repository
        self.rows: dict[UUID, ModelType] = {}
        self.by_mrn: dict[str, ModelType] = {}
        self.snapshot: TreeSnapshot = TreeSnapshot()
        self.editor: TreeEditor = TreeEditor(self.snapshot)

    async def load(self, db: AsyncSession, refresh: bool = False) -> "TreeState[ModelType]":
        """트리 전체를 읽어 스냅샷을 구성합니다.

        Load every row and build the snapshot. ``refresh`` overwrites the
        session's in-memory state, e.g. after a savepoint rollback.
        """
        rows = await self.repository.load_all(db, refresh=refresh)
        self.rows = {row.id: row for row in rows}
        self.by_mrn = {row.mrn: row for row in rows}
        self.snapshot = TreeSnapshot.from_records(rows)
        self.editor = TreeEditor(self.snapshot)
        return self

    def row(self, node_id: UUID) -> ModelType:
        try:
            return self.rows[node_id]
        except KeyError:
            raise NotFoundError(f"{self.repository.model.__name__} not found") from None

    def add_row(self, row: ModelType) -> None:
        self.rows[row.id] = row
        self.by_mrn[row.mrn] = row

    def discard_row(self, row: ModelType) -> None:
        self.rows.pop(row.id, None)
        self.by_mrn.pop(row.mrn, None)

    def parent_mrn(self, node: TreeNode) -> str | None:
        parent = self.snapshot.parent_of(node)
        return parent.natural_key if parent is not None else None

    def write_back(self) -> int:
        """변경된 노드를 행에 반영합니다.

        Copy parent, lineage and activation of every dirty node to its row.

        Returns:
            int: 반영한 노드 수 (Number of rows touched)
        """
        nodes = self.snapshot.pop_dirty()
        for node in nodes:
            row = self.rows[node.key]
            row.parent_id = node.parent_key
            row.lineage = node.lineage
            row.active = node.active
        return len(nodes)


class TreeService:
    """트리 편집 비즈니스 로직을 처리하는 서비스.

    Service handling tree business logic for one tree (areas or categories).

    Args:
        repository: 트리 레포지토리 (Tree repository)
        desc_model: 언어별 이름 모델 클래스 (Localized name model class)
    """

    def __init__(self, repository: TreeRepository[Any], desc_model: type[Any]) -> None:
        self.repository: TreeRepository[Any] = repository
        self.desc_model: type[Any] = desc_model
        self.label: str = repository.model.__name__

    def _to_response(self, row: Any) -> TreeNodeResponse:
        return TreeNodeResponse(
            id=str(row.id),
            mrn=row.mrn,
            parent_id=str(row.parent_id) if row.parent_id else None,
            active=row.active,
            lineage=row.lineage,
            descs=[DescResponse(lang=d.lang, name=d.name) for d in row.descs],
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _new_desc(self, lang: str, name: str) -> Any:
        return self.desc_model(lang=lang, name=name)

    async def _state(self, db: AsyncSession) -> TreeState[Any]:
        return await TreeState(self.repository).load(db)

    async def _get_row(self, db: AsyncSession, node_id: UUID) -> Any:
        row = await self.repository.get_by_id(db, node_id)
        if row is None:
            raise NotFoundError(f"{self.label} not found")
        return row

    async def list_nodes(self, db: AsyncSession, active: bool | None = None) -> list[TreeNodeResponse]:
        """트리 전체 노드를 lineage 순으로 조회합니다.

        List every node ordered by lineage (each parent before its descendants).
        """
        rows = await self.repository.load_all(db)
        if active is not None:
            rows = [row for row in rows if row.active == active]
        return [self._to_response(row) for row in rows]

    async def get_node(self, db: AsyncSession, node_id: UUID) -> TreeNodeResponse:
        """노드를 조회합니다.

        Raises:
            NotFoundError: 노드를 찾을 수 없을 때 (Node not found)
        """
        return self._to_response(await self._get_row(db, node_id))

    async def get_subtree(self, db: AsyncSession, node_id: UUID) -> list[TreeNodeResponse]:
        """노드와 모든 자손을 lineage 접두사 검색으로 조회합니다.

        Retrieve the node and all its descendants with a lineage prefix query.
        """
        row = await self._get_row(db, node_id)
        rows = await self.repository.get_subtree(db, lineage_of(row))
        return [self._to_response(r) for r in rows]

    async def create_node(self, db: AsyncSession, data: TreeNodeCreate) -> TreeNodeResponse:
        """새 노드를 생성합니다.

        Create a node. Its lineage is computed immediately; without an
        explicit ``active`` it inherits the parent's state.

        Raises:
            DuplicateError: 같은 MRN이 이미 있을 때 (MRN already exists)
            UnknownNode: 부모가 없을 때 (Parent does not exist)
        """
        if await self.repository.exists(db, {"mrn": data.mrn}):
            raise DuplicateError(f"A {self.label.lower()} with this MRN already exists")

        state = await self._state(db)
        node = TreeNode(key=uuid.uuid4(), parent_key=data.parent_id, natural_key=data.mrn, descs=desc_map(data.descs))
        state.editor.insert(node, active=data.active)

        row = self.repository.model(
            id=node.key,
            mrn=data.mrn,
            parent_id=data.parent_id,
            active=node.active,
            lineage=node.lineage,
            descs=[self._new_desc(d.lang, d.name) for d in data.descs],
        )
        db.add(row)
        state.add_row(row)
        state.write_back()
        await db.flush()

        logger.info("Created %s %s at %s", self.label, row.mrn, row.lineage)
        return self._to_response(row)

    async def update_node(self, db: AsyncSession, node_id: UUID, data: TreeNodeUpdate) -> TreeNodeResponse:
        """노드의 MRN/이름을 수정합니다.

        Update the MRN and/or the localized names of a node.

        Raises:
            NotFoundError: 노드를 찾을 수 없을 때 (Node not found)
            DuplicateError: 변경할 MRN이 이미 있을 때 (New MRN already taken)
        """
        row = await self._get_row(db, node_id)
        if data.mrn is not None and data.mrn != row.mrn:
            if await self.repository.exists(db, {"mrn": data.mrn}):
                raise DuplicateError(f"A {self.label.lower()} with this MRN already exists")
            row.mrn = data.mrn
        if data.descs is not None:
            replace_children(row.descs, desc_map(data.descs), "lang", "name", self._new_desc)
        await db.flush()
        return self._to_response(row)

    async def move_node(self, db: AsyncSession, node_id: UUID, parent_id: UUID | None) -> TreeNodeResponse:
        """노드를 새 부모 아래로 옮깁니다 (하위 트리 lineage 재계산).

        Move a node with its subtree and recompute the subtree lineages.

        Raises:
            NotFoundError: 노드를 찾을 수 없을 때 (Node not found)
            UnknownNode: 새 부모가 없을 때 (Target parent unknown)
            InvalidReparent: 자기 자신/자손 아래로 옮길 때 (Target inside the moved subtree)
        """
        state = await self._state(db)
        row = state.row(node_id)
        state.editor.reparent(node_id, parent_id)
        touched = state.write_back()
        await db.flush()

        logger.info("Moved %s %s to %s (%d nodes updated)", self.label, row.mrn, row.lineage, touched)
        return self._to_response(row)

    async def set_active(self, db: AsyncSession, node_id: UUID, active: bool) -> ActivationResponse:
        """노드의 활성 상태를 변경하고 조상/자손으로 전파합니다.

        Toggle a node's activation and propagate it (upward on activation,
        downward on deactivation).
        """
        state = await self._state(db)
        state.row(node_id)
        changed = state.editor.set_active(node_id, active)
        state.write_back()
        await db.flush()

        logger.info("Set %s %s active=%s (%d nodes changed)", self.label, node_id, active, len(changed))
        return ActivationResponse(changed=[str(key) for key in changed])

    async def delete_node(self, db: AsyncSession, node_id: UUID) -> None:
        """자식이 없는 노드를 삭제합니다.

        Delete a node without children.

        Raises:
            NotFoundError: 노드를 찾을 수 없을 때 (Node not found)
            HasChildren: 자식이 남아 있을 때 (Node still has children)
        """
        state = await self._state(db)
        row = state.row(node_id)
        state.editor.remove(node_id)
        state.discard_row(row)
        await db.delete(row)
        await db.flush()
        logger.info("Deleted %s %s", self.label, row.mrn)

    async def rebuild_lineage(self, db: AsyncSession) -> RebuildResponse:
        """트리 전체 lineage를 다시 계산합니다.

        Recompute every lineage from the roots down, repairing stale paths.

        Raises:
            CycleDetected: 부모 체인이 순환할 때 (Parent chains form a cycle)
        """
        state = await self._state(db)
        changed = state.editor.rebuild()
        state.write_back()
        await db.flush()

        logger.info("Rebuilt %s lineage: %d of %d nodes changed", self.label, changed, len(state.snapshot))
        return RebuildResponse(changed=changed)


# 싱글턴 인스턴스 — Singleton instances
area_service: TreeService = TreeService(area_repository, AreaDesc)
category_service: TreeService = TreeService(category_repository, CategoryDesc)
