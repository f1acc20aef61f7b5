"""계층 엔진 예외 분류 모듈.

Error taxonomy of the hierarchy consistency and bulk synchronization engine.

Structural errors (``CycleDetected``, ``MissingKey``, ``InvalidReparent``,
``UnknownNode``, ``HasChildren``) signal a caller bug or corrupt data and are
never corrected automatically. ``StoreFailure`` wraps backing-store errors and
carries the counts of the work that was already flushed.
"""

from typing import Any, Hashable


class TreeError(Exception):
    """계층 엔진 예외의 공통 부모 — Base class for all engine errors."""


class CycleDetected(TreeError):
    """부모 체인이 이미 방문한 노드를 다시 방문할 때 발생.

    Raised when walking a parent chain revisits a node.

    Args:
        key: 순환이 감지된 노드 키 (Key that was seen twice)
    """

    def __init__(self, key: Hashable) -> None:
        self.key = key
        super().__init__(f"Cycle detected in parent chain at node {key}")


class MissingKey(TreeError):
    """식별자가 할당되지 않은 노드를 사용할 때 발생 — Node used before identity assignment."""

    def __init__(self, detail: str = "Node has no assigned key") -> None:
        super().__init__(detail)


class InvalidReparent(TreeError):
    """노드를 자기 자신 또는 자손 아래로 옮기려 할 때 발생.

    Raised when a move would make a node its own ancestor.
    The tree is left untouched.
    """

    def __init__(self, key: Hashable, parent_key: Hashable) -> None:
        self.key = key
        self.parent_key = parent_key
        super().__init__(f"Cannot move node {key} under its own subtree (target {parent_key})")


class UnknownNode(TreeError):
    """존재하지 않는 키/자연키를 참조할 때 발생 — Reference to a node or record that does not exist."""

    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(f"Unknown node {key}")


class HasChildren(TreeError):
    """자식이 남아 있는 노드를 삭제하려 할 때 발생 — Delete of a node that still has children."""

    def __init__(self, key: Hashable, child_count: int) -> None:
        self.key = key
        self.child_count = child_count
        super().__init__(f"Node {key} still has {child_count} children")


class StoreFailure(TreeError):
    """저장소 I/O 또는 제약 조건 위반 — Backing-store failure during a flush.

    Attributes:
        result: 마지막 성공 flush까지 반영된 집계 (Counts applied up to the last successful flush)
        processed: 실패 시점까지 처리한 레코드 수 (Records processed when the failure surfaced)
    """

    def __init__(self, detail: str, result: Any = None, processed: int = 0) -> None:
        self.detail = detail
        self.result = result
        self.processed = processed
        super().__init__(detail)
