"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Captures request/response data and sends one structured event per request
to Axiom: endpoint, method, masked body/params, status code, duration and,
for error responses, the error detail (including sync counts reported by
the ``StoreFailure`` handler).
"""

import json
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from navwarn.config import settings
from navwarn.utils.logger import get_logger

logger = get_logger(__name__)

# 마스킹 대상 필드 패턴 — Fields to mask in request bodies and params
_SENSITIVE_KEYS = re.compile(r"(password|secret|token|authorization|api_key|credential)", re.IGNORECASE)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

# 일괄 동기화 요청은 건수만 기록 — Bulk sync bodies are summarized by item count
_SYNC_PATH_MARKER = "/sync/"


def _mask(data: Any, depth: int = 0) -> Any:
    """민감 필드 자동 마스킹 — Recursively mask sensitive fields in dicts/lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {k: "***" if _SENSITIVE_KEYS.search(k) else _mask(v, depth + 1) for k, v in data.items()}
    if isinstance(data, list):
        return [_mask(item, depth + 1) for item in data[:20]]
    return data


def _summarize_body(path: str, body: Any) -> Any:
    if _SYNC_PATH_MARKER in path and isinstance(body, list):
        return {"items": len(body)}
    return _mask(body)


async def _read_body(request: Request) -> Any:
    """요청 body를 JSON으로 읽습니다 — Read the request body as JSON, if any."""
    if request.method not in ("POST", "PUT", "PATCH"):
        return None
    body = await request.body()
    if not body:
        return None
    try:
        return _summarize_body(request.url.path, json.loads(body))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return "(non-json body)"


async def _capture_error(response: Response) -> tuple[Response, Any]:
    """에러 응답의 body를 읽고 응답을 다시 만듭니다.

    Consume an error response body, extract its ``detail`` and return a
    replacement response carrying the same bytes.
    """
    body = b""
    async for chunk in response.body_iterator:
        body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

    try:
        payload = json.loads(body)
        detail: Any = payload.get("detail", payload) if isinstance(payload, dict) else payload
        if isinstance(payload, dict) and "result" in payload:
            detail = {"detail": detail, "result": payload["result"], "processed": payload.get("processed")}
    except (json.JSONDecodeError, UnicodeDecodeError):
        detail = body.decode("utf-8", errors="replace")[:500]

    if isinstance(detail, str) and len(detail) > 500:
        detail = detail[:500] + "..."

    replacement = Response(
        content=body,
        status_code=response.status_code,
        headers=dict(response.headers),
        media_type=response.media_type,
    )
    return replacement, detail


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 Axiom에 로깅하는 미들웨어.

    Middleware that logs all API requests and responses to Axiom.
    Passes requests through untouched when Axiom is not configured.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self._client is None or request.url.path in _SKIP_PATHS:
            return await call_next(request)

        started = time.monotonic()
        event: dict[str, Any] = {
            "app": settings.APP_NAME,
            "method": request.method,
            "path": request.url.path,
            "status_code": 500,
        }
        if request.query_params:
            event["query_params"] = _mask(dict(request.query_params))
        body = await _read_body(request)
        if body is not None:
            event["request_body"] = body

        try:
            response = await call_next(request)
            event["status_code"] = response.status_code
            if response.status_code >= 400:
                response, event["error"] = await _capture_error(response)
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["duration_ms"] = round((time.monotonic() - started) * 1000, 2)
            self._ingest(event)

        return response

    def _ingest(self, event: dict[str, Any]) -> None:
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:
            # 로깅 실패는 요청 처리에 영향 없음 — Never break a request on a log failure
            logger.warning("Axiom ingest failed for %s %s", event["method"], event["path"], exc_info=True)
