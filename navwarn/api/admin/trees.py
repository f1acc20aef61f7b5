"""관리자 트리 라우터 — 영역/카테고리 트리 엔드포인트.

Admin Tree Router — Endpoints shared by the area and category trees.
``build_tree_router`` binds the same endpoint set to one ``TreeService``.

Endpoints:
    - GET    ""                       노드 목록 (List nodes, parents before descendants)
    - GET    "/{node_id}"             노드 조회 (Get node)
    - GET    "/{node_id}/subtree"     하위 트리 조회 (Node and descendants)
    - POST   ""                       노드 생성 (Create node)
    - PUT    "/{node_id}"             MRN/이름 수정 (Update MRN / names)
    - PUT    "/{node_id}/parent"      노드 이동 (Move node)
    - PUT    "/{node_id}/active"      활성 상태 변경 (Toggle activation)
    - DELETE "/{node_id}"             노드 삭제 (Delete leaf node)
    - POST   "/rebuild-lineage"       lineage 재계산 (Rebuild lineages)
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.database import get_db
from navwarn.schemas.tree import (
    ActivationResponse,
    RebuildResponse,
    TreeNodeActivate,
    TreeNodeCreate,
    TreeNodeMove,
    TreeNodeResponse,
    TreeNodeUpdate,
)
from navwarn.services.tree_service import TreeService


def build_tree_router(service: TreeService) -> APIRouter:
    """트리 서비스에 바인딩된 라우터를 생성합니다.

    Build the router for one tree.

    Args:
        service: 영역 또는 카테고리 트리 서비스 (Area or category tree service)

    Returns:
        APIRouter: 트리 엔드포인트 라우터 (Router with the tree endpoints)
    """
    router: APIRouter = APIRouter()

    @router.get("", response_model=list[TreeNodeResponse])
    async def list_nodes(
        db: Annotated[AsyncSession, Depends(get_db)],
        active: bool | None = None,
    ) -> list[TreeNodeResponse]:
        """노드 목록을 lineage 순으로 조회합니다 — List nodes, parents before descendants."""
        return await service.list_nodes(db, active=active)

    @router.post("/rebuild-lineage", response_model=RebuildResponse)
    async def rebuild_lineage(
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> RebuildResponse:
        """트리 전체 lineage를 다시 계산합니다 — Recompute every lineage."""
        result: RebuildResponse = await service.rebuild_lineage(db)
        await db.commit()
        return result

    @router.get("/{node_id}", response_model=TreeNodeResponse)
    async def get_node(
        node_id: UUID,
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> TreeNodeResponse:
        """노드를 조회합니다 — Retrieve a node."""
        return await service.get_node(db, node_id)

    @router.get("/{node_id}/subtree", response_model=list[TreeNodeResponse])
    async def get_subtree(
        node_id: UUID,
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> list[TreeNodeResponse]:
        """노드와 모든 자손을 조회합니다 — Retrieve a node and its descendants."""
        return await service.get_subtree(db, node_id)

    @router.post("", response_model=TreeNodeResponse, status_code=201)
    async def create_node(
        data: TreeNodeCreate,
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> TreeNodeResponse:
        """노드를 생성합니다 — Create a node."""
        result: TreeNodeResponse = await service.create_node(db, data)
        await db.commit()
        return result

    @router.put("/{node_id}", response_model=TreeNodeResponse)
    async def update_node(
        node_id: UUID,
        data: TreeNodeUpdate,
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> TreeNodeResponse:
        """노드의 MRN/이름을 수정합니다 — Update MRN and names."""
        result: TreeNodeResponse = await service.update_node(db, node_id, data)
        await db.commit()
        return result

    @router.put("/{node_id}/parent", response_model=TreeNodeResponse)
    async def move_node(
        node_id: UUID,
        data: TreeNodeMove,
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> TreeNodeResponse:
        """노드를 새 부모 아래로 옮깁니다 — Move a node under a new parent."""
        result: TreeNodeResponse = await service.move_node(db, node_id, data.parent_id)
        await db.commit()
        return result

    @router.put("/{node_id}/active", response_model=ActivationResponse)
    async def set_active(
        node_id: UUID,
        data: TreeNodeActivate,
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> ActivationResponse:
        """활성 상태를 변경하고 전파합니다 — Toggle and propagate activation."""
        result: ActivationResponse = await service.set_active(db, node_id, data.active)
        await db.commit()
        return result

    @router.delete("/{node_id}", status_code=204)
    async def delete_node(
        node_id: UUID,
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> None:
        """자식이 없는 노드를 삭제합니다 — Delete a node without children."""
        await service.delete_node(db, node_id)
        await db.commit()

    return router
