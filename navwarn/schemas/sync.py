"""일괄 동기화 결과 Pydantic 응답 스키마 정의.

Bulk synchronization result response schemas.
"""

from pydantic import BaseModel

from navwarn.core.sync import SyncResult


class SyncFailureResponse(BaseModel):
    key: str  # 실패한 레코드 자연키 (Natural key of the failed record)
    detail: str  # 실패 사유 (Failure reason)


class SyncResultResponse(BaseModel):
    """동기화 결과 응답 스키마.

    Bulk synchronization result.

    Attributes:
        created: 생성 건수 (Records created)
        updated: 수정 건수 (Records updated in place)
        unchanged: 변경 없음 건수 (Records left untouched)
        failed: 건너뛴 실패 건수 (Records skipped after a store failure)
        failures: 실패 상세 (Failure details)
    """

    created: int
    updated: int
    unchanged: int
    failed: int = 0
    failures: list[SyncFailureResponse] = []

    @classmethod
    def from_result(cls, result: SyncResult) -> "SyncResultResponse":
        return cls(
            created=result.created,
            updated=result.updated,
            unchanged=result.unchanged,
            failed=result.failed,
            failures=[SyncFailureResponse(key=key, detail=detail) for key, detail in result.failures],
        )
