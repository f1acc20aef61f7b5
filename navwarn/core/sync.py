"""일괄 동기화 엔진 모듈.

Bulk synchronization engine.

Reconciles a batch of candidate records against the record store by natural
key: new records are created, changed records are updated in place (identity
kept), unchanged records are not written. Work is flushed in bounded chunks,
each chunk running inside a store transaction (a SAVEPOINT for SQL stores),
so a failure rolls back only the chunk being processed.

Usage:
    synchronizer = BulkSynchronizer(target, batch_size=100)
    result = await synchronizer.synchronize(candidates)
"""

import time
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterator, Mapping, Protocol, Sequence

from navwarn.core.changes import ChangeDetector, ChangeKind
from navwarn.core.errors import CycleDetected, StoreFailure
from navwarn.utils.logger import get_logger

logger = get_logger(__name__)


class FailurePolicy(str, Enum):
    """저장 실패 처리 정책.

    Store failure policy.

    ABORT: 실패한 청크만 롤백하고 중단 (Roll back the failing chunk and stop)
    SKIP: 실패한 레코드만 롤백하고 계속 (Roll back the failing record and continue)
    """

    ABORT = "abort"
    SKIP = "skip"


@dataclass
class SyncResult:
    """동기화 집계 결과 — Counts of one synchronization pass."""

    created: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    failures: list[tuple[str, str]] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.created + self.updated + self.unchanged + self.failed

    def count(self, kind: ChangeKind) -> None:
        if kind is ChangeKind.NEW:
            self.created += 1
        elif kind is ChangeKind.CHANGED:
            self.updated += 1
        else:
            self.unchanged += 1

    def merge(self, other: "SyncResult") -> None:
        self.created += other.created
        self.updated += other.updated
        self.unchanged += other.unchanged
        self.failed += other.failed
        self.failures.extend(other.failures)


class RecordStore(Protocol):
    """엔진이 사용하는 저장소 인터페이스 — Record store consumed by the engine."""

    async def find_by_key(self, key: str) -> Any | None: ...

    async def find_by_prefix(self, prefix: str) -> list[Any]: ...

    async def save(self, record: Any) -> None: ...

    async def flush(self) -> None: ...

    async def delete(self, record: Any) -> None: ...


class SyncTarget(RecordStore, Protocol):
    """레코드 유형별 동기화 대상.

    Per record type sync target: a record store that also knows how to key,
    compare, build and merge its records.

    Attributes:
        name: 로그용 레코드 유형 이름 (Record type name used in logs)
        significant: 비교할 유의미 필드 (Significant fields compared by the detector)
    """

    name: str
    significant: tuple[str, ...]

    def natural_key(self, candidate: Any) -> str: ...

    def parent_natural_key(self, candidate: Any) -> str | None: ...

    def significant_fields(self, record: Any) -> Mapping[str, Any]: ...

    async def build(self, candidate: Any) -> Any: ...

    async def merge(self, record: Any, candidate: Any) -> None: ...

    async def after_write(self, record: Any, candidate: Any, kind: ChangeKind) -> None: ...

    def transaction(self) -> AbstractAsyncContextManager[Any]: ...


def order_parents_first(
    candidates: Sequence[Any],
    key_of: Callable[[Any], str],
    parent_of: Callable[[Any], str | None],
) -> list[Any]:
    """같은 배치 안의 부모가 자식보다 먼저 오도록 안정적으로 정렬합니다.

    Stable reorder so that a candidate whose parent is part of the same batch
    comes after that parent. Candidates whose parent is outside the batch keep
    their relative position.

    Raises:
        CycleDetected: 배치 안의 부모 참조가 순환할 때 (Parent references in the batch form a cycle)
    """
    by_key: dict[str, Any] = {}
    for candidate in candidates:
        by_key.setdefault(key_of(candidate), candidate)

    ordered: list[Any] = []
    emitted: set[int] = set()
    for candidate in candidates:
        chain: list[Any] = []
        seen: set[str] = set()
        current = candidate
        while current is not None and id(current) not in emitted:
            key = key_of(current)
            if key in seen:
                raise CycleDetected(key)
            seen.add(key)
            chain.append(current)
            parent_key = parent_of(current)
            current = by_key.get(parent_key) if parent_key is not None else None
        for item in reversed(chain):
            emitted.add(id(item))
            ordered.append(item)
    return ordered


def _chunks(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class BulkSynchronizer:
    """후보 배치를 저장소 상태와 조정하는 동기화기.

    Orchestrates one synchronization pass over a batch of candidates.
    Stateless across invocations.

    Args:
        target: 레코드 유형별 동기화 대상 (Sync target for the record type)
        batch_size: flush 단위 레코드 수 (Records per flushed chunk)
        policy: 저장 실패 정책 (Store failure policy)
    """

    def __init__(
        self,
        target: SyncTarget,
        batch_size: int = 100,
        policy: FailurePolicy = FailurePolicy.ABORT,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.target: SyncTarget = target
        self.batch_size: int = batch_size
        self.policy: FailurePolicy = FailurePolicy(policy)
        self.detector: ChangeDetector = ChangeDetector(target.significant, fields_of=target.significant_fields)

    async def synchronize(self, candidates: Sequence[Any]) -> SyncResult:
        """후보 배치를 동기화합니다.

        Synchronize a batch of candidates.

        Args:
            candidates: 임의의 안정적 순서의 후보 목록 (Candidates in arbitrary but stable order)

        Returns:
            SyncResult: 생성/수정/변경없음/실패 건수 (created/updated/unchanged/failed counts)

        Raises:
            StoreFailure: ABORT 정책에서 저장 실패 시, 마지막 성공 flush까지의 집계 포함
                          (On a store failure under ABORT, carrying counts up to the last successful flush)
        """
        started = time.monotonic()
        target = self.target
        ordered = order_parents_first(list(candidates), target.natural_key, target.parent_natural_key)

        result = SyncResult()
        processed = 0
        skipped: set[str] = set()
        for chunk in _chunks(ordered, self.batch_size):
            pending = SyncResult()
            try:
                async with target.transaction():
                    for candidate in chunk:
                        processed += 1
                        if self.policy is FailurePolicy.SKIP:
                            await self._apply_isolated(candidate, pending, skipped)
                        else:
                            pending.count(await self._apply(candidate))
                    await target.flush()
            except StoreFailure as exc:
                logger.error(
                    "Aborted %s sync after %d records (applied: created %d, updated %d, unchanged %d): %s",
                    target.name, processed, result.created, result.updated, result.unchanged, exc.detail,
                )
                raise StoreFailure(
                    f"{target.name} sync aborted at record {processed}: {exc.detail}",
                    result=result,
                    processed=processed,
                ) from exc
            result.merge(pending)

        logger.info(
            "Synchronized %d %s (created %d, updated %d, unchanged %d, failed %d) in %d ms",
            len(ordered), target.name, result.created, result.updated, result.unchanged,
            result.failed, (time.monotonic() - started) * 1000,
        )
        return result

    async def _apply(self, candidate: Any) -> ChangeKind:
        target = self.target
        key = target.natural_key(candidate)
        persisted = await target.find_by_key(key)
        kind = self.detector.classify(candidate, persisted)

        if kind is ChangeKind.NEW:
            record = await target.build(candidate)
            await target.save(record)
            await target.after_write(record, candidate, kind)
        elif kind is ChangeKind.CHANGED:
            logger.debug("%s %s changed: %s", target.name, key, ", ".join(self.detector.diff(candidate, persisted)))
            await target.merge(persisted, candidate)
            await target.save(persisted)
            await target.after_write(persisted, candidate, kind)

        logger.debug("%s %s: %s", target.name, key, kind.value)
        return kind

    async def _apply_isolated(self, candidate: Any, pending: SyncResult, skipped: set[str]) -> None:
        # 레코드마다 별도 트랜잭션 — Each record in its own nested transaction
        key = self.target.natural_key(candidate)
        parent_key = self.target.parent_natural_key(candidate)
        # 건너뛴 새 부모를 참조하는 자식도 건너뜀 — Children of a skipped, never-stored parent are skipped too
        if parent_key in skipped and await self.target.find_by_key(parent_key) is None:
            self._skip(key, f"parent {parent_key} was skipped", pending, skipped)
            return
        try:
            async with self.target.transaction():
                kind = await self._apply(candidate)
                await self.target.flush()
        except StoreFailure as exc:
            self._skip(key, exc.detail, pending, skipped)
            return
        pending.count(kind)

    def _skip(self, key: str, reason: str, pending: SyncResult, skipped: set[str]) -> None:
        logger.warning("Skipped %s %s: %s", self.target.name, key, reason)
        skipped.add(key)
        pending.failed += 1
        pending.failures.append((key, reason))
