"""관리자 API 라우터 패키지 — 모든 관리자 엔드포인트 통합.

Admin API Router package — Aggregates all admin-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - areas: 영역 트리 관리 (Area tree management)
    - categories: 카테고리 트리 관리 (Category tree management)
    - sync: 일괄 동기화 (Bulk synchronization per record type)
    - transmitters: NAVTEX 송신소 조회/선택 (NAVTEX transmitter lookup and selection)
    - message-tags: 메시지 태그 및 만료 정리 (Message tags and expired tag cleanup)
    - atons: 항로표지 조회 (AtoN lookup)
"""

from fastapi import APIRouter

from navwarn.api.admin.atons import router as atons_router
from navwarn.api.admin.message_tags import router as message_tags_router
from navwarn.api.admin.sync import router as sync_router
from navwarn.api.admin.transmitters import router as transmitters_router
from navwarn.api.admin.trees import build_tree_router
from navwarn.services.tree_service import area_service, category_service

admin_router: APIRouter = APIRouter()

# ---------------------------------------------------------------------------
# 트리 라우터 등록 — Register tree routers
# ---------------------------------------------------------------------------
admin_router.include_router(build_tree_router(area_service), prefix="/areas", tags=["Areas"])
admin_router.include_router(build_tree_router(category_service), prefix="/categories", tags=["Categories"])

# ---------------------------------------------------------------------------
# 동기화 및 조회 라우터 등록 — Register sync and lookup routers
# ---------------------------------------------------------------------------
admin_router.include_router(sync_router, prefix="/sync", tags=["Sync"])
admin_router.include_router(transmitters_router, prefix="/transmitters", tags=["NAVTEX Transmitters"])
admin_router.include_router(message_tags_router, prefix="/message-tags", tags=["Message Tags"])
admin_router.include_router(atons_router, prefix="/atons", tags=["AtoNs"])
