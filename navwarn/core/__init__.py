"""계층 일관성 및 일괄 동기화 엔진 패키지.

Hierarchy consistency and bulk synchronization engine.
Pure in-process components with no database or HTTP dependency; the
repositories and services adapt them to SQLAlchemy.

Modules:
    tree: 노드 아레나 (Node arena addressed by key)
    lineage: 물질화 경로 계산 (Materialized path encoding)
    activation: 활성 상태 전파 (Activation propagation)
    matching: 하위 트리 매칭 (Subtree matching by lineage prefix)
    changes: 변경 감지 (Change detection on significant fields)
    editor: 트리 편집 연산 (Insert / reparent / activate / remove / rebuild)
    sync: 일괄 동기화 (Bulk synchronization)
    errors: 예외 분류 (Error taxonomy)
"""

from navwarn.core.activation import ActivationPropagator
from navwarn.core.changes import HOUSEKEEPING_FIELDS, ChangeDetector, ChangeKind
from navwarn.core.editor import TreeEditor
from navwarn.core.errors import (
    CycleDetected,
    HasChildren,
    InvalidReparent,
    MissingKey,
    StoreFailure,
    TreeError,
    UnknownNode,
)
from navwarn.core.lineage import DELIMITER, PathEncoder, format_lineage
from navwarn.core.matching import SubtreeMatcher, is_within, matches
from navwarn.core.sync import BulkSynchronizer, FailurePolicy, SyncResult, order_parents_first
from navwarn.core.tree import TreeNode, TreeSnapshot, desc_map

__all__ = [
    "ActivationPropagator",
    "HOUSEKEEPING_FIELDS", "ChangeDetector", "ChangeKind",
    "TreeEditor",
    "CycleDetected", "HasChildren", "InvalidReparent", "MissingKey", "StoreFailure", "TreeError", "UnknownNode",
    "DELIMITER", "PathEncoder", "format_lineage",
    "SubtreeMatcher", "is_within", "matches",
    "BulkSynchronizer", "FailurePolicy", "SyncResult", "order_parents_first",
    "TreeNode", "TreeSnapshot", "desc_map",
]
