"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 예외 처리기, 라우터 등록.

FastAPI application entry point — Middleware, exception handlers and router
registration. Engine errors (``navwarn.core.errors``) are mapped to HTTP
responses here so services can raise them unchanged.
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from navwarn.api.admin import admin_router
from navwarn.config import settings
from navwarn.core.errors import (
    CycleDetected,
    HasChildren,
    InvalidReparent,
    MissingKey,
    StoreFailure,
    TreeError,
    UnknownNode,
)
from navwarn.core.sync import SyncResult
from navwarn.middleware.axiom_logging import AxiomLoggingMiddleware
from navwarn.schemas.sync import SyncResultResponse
from navwarn.utils.logger import get_logger

logger = get_logger(__name__)

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Axiom API 로깅 미들웨어 — Axiom API request/response logging
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 엔진 예외 → HTTP 상태 코드 — Engine error to HTTP status mapping (first match wins)
_ERROR_STATUS: tuple[tuple[type[TreeError], int], ...] = (
    (UnknownNode, status.HTTP_404_NOT_FOUND),
    (InvalidReparent, status.HTTP_400_BAD_REQUEST),
    (HasChildren, status.HTTP_400_BAD_REQUEST),
    (CycleDetected, status.HTTP_409_CONFLICT),
    (StoreFailure, status.HTTP_409_CONFLICT),
    (MissingKey, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


@app.exception_handler(TreeError)
async def tree_error_handler(request: Request, exc: TreeError) -> JSONResponse:
    """엔진 예외를 JSON 에러 응답으로 변환합니다.

    Convert an engine error into a JSON error response. ``StoreFailure``
    additionally reports the counts applied before the failure.
    """
    status_code = next(
        (code for error_type, code in _ERROR_STATUS if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    content: dict = {"detail": str(exc)}
    if isinstance(exc, StoreFailure):
        result = exc.result if isinstance(exc.result, SyncResult) else SyncResult()
        content["result"] = SyncResultResponse.from_result(result).model_dump()
        content["processed"] = exc.processed
        content["committed"] = settings.SYNC_COMMIT_PARTIAL

    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content=content)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


app.include_router(admin_router, prefix="/api/v1/admin")
