"""일괄 동기화 엔진 단위 테스트 — 변경 감지, 순서 정렬, 실패 정책.

Bulk synchronization engine unit tests against an in-memory record store:
change detection, parents-first ordering, idempotence and the ABORT / SKIP
store failure policies.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from navwarn.core import (
    BulkSynchronizer,
    ChangeDetector,
    ChangeKind,
    CycleDetected,
    FailurePolicy,
    StoreFailure,
    SyncResult,
    order_parents_first,
)
from navwarn.core.changes import normalize


@dataclass
class Item:
    """동기화 후보 — Candidate with a natural key, payload and optional parent."""

    key: str
    value: str = ""
    tags: dict[str, str] = field(default_factory=dict)
    parent: str | None = None

    def significant_fields(self) -> dict[str, Any]:
        return {"value": self.value, "tags": self.tags}


@dataclass
class Record:
    """저장 레코드 — Persisted record with housekeeping fields."""

    id: int
    key: str
    value: str
    tags: dict[str, str]
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def significant_fields(self) -> dict[str, Any]:
        return {"value": self.value, "tags": self.tags}


@dataclass
class Position:
    pos: Any

    def significant_fields(self) -> dict[str, Any]:
        return {"pos": self.pos}


class MemoryStore:
    """인메모리 동기화 대상. ``fail_on`` 키가 flush에 포함되면 StoreFailure.

    In-memory sync target; flushing a record whose key is in ``fail_on``
    raises ``StoreFailure``. Transactions snapshot and restore the committed
    state like a savepoint.
    """

    name = "items"
    significant = ("value", "tags")

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.records: dict[str, Record] = {}
        self.pending: dict[str, Record] = {}
        self.fail_on: set[str] = fail_on or set()
        self.flushes: int = 0
        self.writes: list[str] = []
        self._next_id = 1

    async def find_by_key(self, key: str) -> Record | None:
        return self.pending.get(key) or self.records.get(key)

    async def find_by_prefix(self, prefix: str) -> list[Record]:
        return [r for k, r in sorted(self.records.items()) if k.startswith(prefix)]

    async def save(self, record: Record) -> None:
        self.pending[record.key] = record
        self.writes.append(record.key)

    async def flush(self) -> None:
        failing = self.fail_on.intersection(self.pending)
        if failing:
            raise StoreFailure(f"constraint violated for {sorted(failing)[0]}")
        self.records.update(self.pending)
        self.pending.clear()
        self.flushes += 1

    async def delete(self, record: Record) -> None:
        self.records.pop(record.key, None)

    @asynccontextmanager
    async def transaction(self):
        saved = {k: Record(**vars(r)) for k, r in self.records.items()}
        try:
            yield
        except Exception:
            self.records = saved
            self.pending.clear()
            raise

    def natural_key(self, candidate: Item) -> str:
        return candidate.key

    def parent_natural_key(self, candidate: Item) -> str | None:
        return candidate.parent

    def significant_fields(self, record: Record) -> dict[str, Any]:
        return record.significant_fields()

    async def build(self, candidate: Item) -> Record:
        record = Record(id=self._next_id, key=candidate.key, value=candidate.value, tags=dict(candidate.tags))
        self._next_id += 1
        return record

    async def merge(self, record: Record, candidate: Item) -> None:
        record.value = candidate.value
        record.tags = dict(candidate.tags)

    async def after_write(self, record: Record, candidate: Item, kind: ChangeKind) -> None:
        pass


class TestChangeDetector:
    """변경 감지 테스트."""

    def test_classify(self):
        detector = ChangeDetector(["value", "tags"])
        record = Record(id=1, key="a", value="x", tags={"k": "v"})
        assert detector.classify(Item("a", "x", {"k": "v"}), None) is ChangeKind.NEW
        assert detector.classify(Item("a", "x", {"k": "v"}), record) is ChangeKind.UNCHANGED
        assert detector.classify(Item("a", "y", {"k": "v"}), record) is ChangeKind.CHANGED
        assert detector.diff(Item("a", "x", {"k": "w"}), record) == ["tags"]

    def test_housekeeping_fields_ignored(self):
        """관리용 필드만 다르면 변경 없음."""
        detector = ChangeDetector(["value", "tags"])
        old = Record(id=1, key="a", value="x", tags={}, updated_at=datetime(2020, 1, 1, tzinfo=timezone.utc))
        assert detector.classify(Item("a", "x"), old) is ChangeKind.UNCHANGED

    def test_housekeeping_field_rejected(self):
        with pytest.raises(ValueError):
            ChangeDetector(["value", "updated_at"])
        with pytest.raises(ValueError):
            ChangeDetector([])

    def test_sets_order_independent(self):
        """집합은 순서와 무관하게 비교."""
        assert normalize({"b", "a"}) == normalize(frozenset(["a", "b"]))

    def test_sequences_keep_order(self):
        """리스트/튜플은 순서와 중복까지 비교."""
        detector = ChangeDetector(["pos"])
        assert detector.classify(Position((55.0, 10.0)), Position((10.0, 55.0))) is ChangeKind.CHANGED
        assert detector.classify(Position(["a", "a"]), Position(["a"])) is ChangeKind.CHANGED
        assert detector.classify(Position([55.0, 10.0]), Position((55.0, 10.0))) is ChangeKind.UNCHANGED

    def test_datetimes_compared_in_utc(self):
        """같은 시각의 다른 시간대 표현은 동일."""
        utc = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        cet = utc.astimezone(timezone(timedelta(hours=1)))
        naive = datetime(2026, 1, 1, 12, 0)
        assert normalize(utc) == normalize(cet) == normalize(naive)


class TestOrdering:
    """부모 우선 정렬 테스트."""

    def test_parent_moved_before_child(self):
        items = [Item("c", parent="b"), Item("b", parent="a"), Item("x"), Item("a")]
        ordered = order_parents_first(items, lambda i: i.key, lambda i: i.parent)
        keys = [i.key for i in ordered]
        assert keys.index("a") < keys.index("b") < keys.index("c")
        assert sorted(keys) == ["a", "b", "c", "x"]

    def test_external_parent_keeps_order(self):
        """배치 밖의 부모를 참조하는 후보는 입력 순서 유지."""
        items = [Item("b", parent="outside"), Item("a", parent="outside")]
        ordered = order_parents_first(items, lambda i: i.key, lambda i: i.parent)
        assert [i.key for i in ordered] == ["b", "a"]

    def test_cycle_in_batch(self):
        items = [Item("a", parent="b"), Item("b", parent="a")]
        with pytest.raises(CycleDetected):
            order_parents_first(items, lambda i: i.key, lambda i: i.parent)


class TestBulkSynchronizer:
    """일괄 동기화 테스트."""

    async def test_new_and_unchanged_counts(self):
        """새 레코드 1건, 변경 없음 2건."""
        store = MemoryStore()
        await BulkSynchronizer(store).synchronize([Item("a", "1"), Item("b", "2")])

        result = await BulkSynchronizer(store).synchronize([Item("a", "1"), Item("b", "2"), Item("c", "3")])
        assert (result.created, result.updated, result.unchanged) == (1, 0, 2)

    async def test_changed_record_keeps_identity(self):
        """변경된 레코드는 같은 식별자로 제자리 수정."""
        store = MemoryStore()
        await BulkSynchronizer(store).synchronize([Item("a", "1")])
        record_id = store.records["a"].id

        result = await BulkSynchronizer(store).synchronize([Item("a", "2")])
        assert result.updated == 1
        assert store.records["a"].id == record_id
        assert store.records["a"].value == "2"

    async def test_idempotent(self):
        """같은 배치를 두 번 적용하면 두 번째는 모두 변경 없음, 쓰기 없음."""
        store = MemoryStore()
        batch = [Item("a", "1", {"k": "v"}), Item("b", "2")]
        await BulkSynchronizer(store).synchronize(batch)
        writes = len(store.writes)

        result = await BulkSynchronizer(store).synchronize(batch)
        assert result.unchanged == 2
        assert result.created == result.updated == 0
        assert len(store.writes) == writes

    async def test_absent_records_not_deleted(self):
        """배치에 없는 레코드는 삭제되지 않음."""
        store = MemoryStore()
        await BulkSynchronizer(store).synchronize([Item("a"), Item("b")])
        await BulkSynchronizer(store).synchronize([Item("a")])
        assert set(store.records) == {"a", "b"}

    async def test_chunked_flushes(self):
        """batch_size 단위로 flush."""
        store = MemoryStore()
        await BulkSynchronizer(store, batch_size=2).synchronize([Item(str(i)) for i in range(5)])
        assert store.flushes == 3
        assert len(store.records) == 5

    async def test_empty_batch(self):
        result = await BulkSynchronizer(MemoryStore()).synchronize([])
        assert result.processed == 0

    async def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            BulkSynchronizer(MemoryStore(), batch_size=0)

    async def test_abort_keeps_flushed_prefix(self):
        """ABORT: 실패한 청크만 롤백, 이전 청크는 유지, 집계 포함."""
        store = MemoryStore(fail_on={"3"})
        synchronizer = BulkSynchronizer(store, batch_size=2, policy=FailurePolicy.ABORT)

        with pytest.raises(StoreFailure) as exc_info:
            await synchronizer.synchronize([Item(str(i)) for i in range(6)])

        assert set(store.records) == {"0", "1"}
        failure = exc_info.value
        assert isinstance(failure.result, SyncResult)
        assert failure.result.created == 2
        assert failure.processed == 4

    async def test_skip_continues_past_failure(self):
        """SKIP: 실패한 레코드만 건너뛰고 계속."""
        store = MemoryStore(fail_on={"1"})
        synchronizer = BulkSynchronizer(store, batch_size=2, policy=FailurePolicy.SKIP)

        result = await synchronizer.synchronize([Item(str(i)) for i in range(4)])

        assert result.created == 3
        assert result.failed == 1
        assert result.failures[0][0] == "1"
        assert set(store.records) == {"0", "2", "3"}

    async def test_skip_children_of_skipped_new_parent(self):
        """SKIP: 저장되지 못한 새 부모의 자식은 실패로 기록하고 계속."""
        store = MemoryStore(fail_on={"p"})
        synchronizer = BulkSynchronizer(store, batch_size=10, policy=FailurePolicy.SKIP)

        result = await synchronizer.synchronize([
            Item("p"), Item("c", parent="p"), Item("g", parent="c"), Item("q"),
        ])

        assert (result.created, result.failed) == (1, 3)
        assert [key for key, _ in result.failures] == ["p", "c", "g"]
        assert "parent p" in result.failures[1][1]
        assert set(store.records) == {"q"}

    async def test_skip_keeps_children_of_existing_parent(self):
        """SKIP: 부모 수정만 실패하면 기존 부모 아래 자식은 정상 처리."""
        store = MemoryStore()
        await BulkSynchronizer(store).synchronize([Item("p", "x")])
        store.fail_on = {"p"}

        result = await BulkSynchronizer(store, policy=FailurePolicy.SKIP).synchronize([
            Item("p", "y"), Item("c", parent="p"),
        ])

        assert (result.created, result.failed) == (1, 1)
        assert store.records["p"].value == "x"
        assert "c" in store.records

    async def test_policy_from_string(self):
        assert BulkSynchronizer(MemoryStore(), policy="skip").policy is FailurePolicy.SKIP

    async def test_parents_synchronized_first(self):
        """자식이 먼저 와도 부모부터 저장."""
        store = MemoryStore()
        await BulkSynchronizer(store).synchronize([Item("child", parent="root"), Item("root")])
        assert store.writes == ["root", "child"]

    async def test_find_by_prefix(self):
        store = MemoryStore()
        await BulkSynchronizer(store).synchronize([Item("dk:1"), Item("dk:2"), Item("se:1")])
        assert [r.key for r in await store.find_by_prefix("dk:")] == ["dk:1", "dk:2"]
