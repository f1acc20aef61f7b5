"""트리 노드 아레나 모듈.

Tree node arena.
Nodes are addressed by key and hold explicit ``parent_key`` / ``child_keys``
fields instead of mutual object references. A ``TreeSnapshot`` is built from
persisted rows for one operation (one transaction) and tracks which nodes were
modified so the caller can write exactly those back.
"""

from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, Iterator

from navwarn.core.errors import CycleDetected, MissingKey, UnknownNode


@dataclass
class TreeNode:
    """아레나에 저장되는 트리 노드.

    A tree node stored in the arena.

    Attributes:
        key: 불변 식별자, 할당 전에는 None (Opaque identity, None until assigned)
        parent_key: 부모 키, 루트면 None (Parent key, None for roots)
        child_keys: 자식 키 목록 (Ordered child keys)
        active: 활성 상태 (Activation flag)
        lineage: 물질화 경로, 엔진이 계산 (Materialized path, derived by the engine)
        natural_key: 외부 자연키 MRN (Caller-meaningful key used by bulk sync)
        descs: 언어별 설명 (Localized descriptions keyed by language)
    """

    key: Hashable | None
    parent_key: Hashable | None = None
    child_keys: list[Hashable] = field(default_factory=list)
    active: bool = True
    lineage: str | None = None
    natural_key: str | None = None
    descs: dict[str, Any] = field(default_factory=dict)


def desc_map(descs: Iterable[Any]) -> dict[str, Any]:
    """설명 레코드를 언어 → 이름 매핑으로 변환합니다.

    Convert description records (ORM rows or schemas exposing ``lang`` and
    ``name``) into an order-independent ``{lang: name}`` mapping.

    Raises:
        ValueError: 같은 언어가 두 번 나올 때 (A language appears twice)
    """
    result: dict[str, Any] = {}
    for desc in descs:
        if desc.lang in result:
            raise ValueError(f"Duplicate description language '{desc.lang}'")
        result[desc.lang] = desc.name
    return result


class TreeSnapshot:
    """키로 주소 지정되는 노드 아레나.

    Arena of tree nodes addressed by key.
    Built once per operation; ``dirty`` collects the keys of every node whose
    parent, lineage or activation changed since the snapshot was built.
    """

    def __init__(self, nodes: Iterable[TreeNode] = ()) -> None:
        self._nodes: dict[Hashable, TreeNode] = {}
        self.dirty: set[Hashable] = set()
        for node in nodes:
            if node.key is None:
                raise MissingKey()
            node.child_keys = []
            self._nodes[node.key] = node
        # 부모-자식 링크 구성 — Link children in insertion order
        for node in self._nodes.values():
            if node.parent_key is not None:
                if node.parent_key not in self._nodes:
                    raise UnknownNode(node.parent_key)
                self._nodes[node.parent_key].child_keys.append(node.key)

    @classmethod
    def from_records(cls, records: Iterable[Any]) -> "TreeSnapshot":
        """ORM 행(id, parent_id, active, lineage, mrn, descs)으로 스냅샷을 만듭니다.

        Build a snapshot from persisted rows exposing ``id``, ``parent_id``,
        ``active``, ``lineage``, ``mrn`` and ``descs``.
        """
        return cls(
            TreeNode(
                key=record.id,
                parent_key=record.parent_id,
                active=record.active,
                lineage=record.lineage,
                natural_key=record.mrn,
                descs=desc_map(record.descs),
            )
            for record in records
        )

    def __contains__(self, key: Hashable) -> bool:
        return key in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[TreeNode]:
        return iter(self._nodes.values())

    def get(self, key: Hashable) -> TreeNode:
        """키로 노드를 조회합니다 — Raises ``UnknownNode`` if absent."""
        try:
            return self._nodes[key]
        except KeyError:
            raise UnknownNode(key) from None

    def roots(self) -> list[TreeNode]:
        return [n for n in self._nodes.values() if n.parent_key is None]

    def parent_of(self, node: TreeNode) -> TreeNode | None:
        if node.parent_key is None:
            return None
        return self.get(node.parent_key)

    def children_of(self, node: TreeNode) -> list[TreeNode]:
        return [self._nodes[k] for k in node.child_keys]

    def ancestors(self, node: TreeNode) -> Iterator[TreeNode]:
        """부모부터 루트까지 조상을 순회합니다.

        Iterate ancestors from the immediate parent up to the root.

        Raises:
            CycleDetected: 부모 체인이 순환할 때 (Parent chain revisits a node)
        """
        seen: set[Hashable] = {node.key}
        current = self.parent_of(node)
        while current is not None:
            if current.key in seen:
                raise CycleDetected(current.key)
            seen.add(current.key)
            yield current
            current = self.parent_of(current)

    def descendants(self, node: TreeNode) -> Iterator[TreeNode]:
        """전위 순서로 모든 자손을 순회합니다 (자기 자신 제외).

        Iterate all descendants depth-first in pre-order, excluding the node.
        """
        seen: set[Hashable] = {node.key}
        stack = list(reversed(self.children_of(node)))
        while stack:
            current = stack.pop()
            if current.key in seen:
                raise CycleDetected(current.key)
            seen.add(current.key)
            yield current
            stack.extend(reversed(self.children_of(current)))

    def add(self, node: TreeNode) -> None:
        """노드를 아레나에 추가하고 부모의 자식 목록에 연결합니다.

        Add a node and link it under its parent.

        Raises:
            MissingKey: 키가 없을 때 (Node has no key)
            UnknownNode: 부모가 아레나에 없을 때 (Parent not in the arena)
            ValueError: 같은 키가 이미 있을 때 (Key already present)
        """
        if node.key is None:
            raise MissingKey()
        if node.key in self._nodes:
            raise ValueError(f"Node {node.key} already exists")
        if node.parent_key is not None:
            self.get(node.parent_key).child_keys.append(node.key)
        node.child_keys = []
        self._nodes[node.key] = node
        self.dirty.add(node.key)

    def attach(self, node: TreeNode, parent_key: Hashable | None) -> None:
        """노드를 현재 부모에서 떼어 새 부모 아래로 옮깁니다.

        Detach ``node`` from its current parent and link it under ``parent_key``.
        Validation is the caller's responsibility.
        """
        if node.parent_key is not None:
            self.get(node.parent_key).child_keys.remove(node.key)
        if parent_key is not None:
            self.get(parent_key).child_keys.append(node.key)
        node.parent_key = parent_key
        self.dirty.add(node.key)

    def discard(self, node: TreeNode) -> None:
        """잎 노드를 아레나에서 제거합니다 — Remove a leaf node from the arena."""
        if node.parent_key is not None:
            self.get(node.parent_key).child_keys.remove(node.key)
        del self._nodes[node.key]
        self.dirty.discard(node.key)

    def mark_dirty(self, node: TreeNode) -> None:
        self.dirty.add(node.key)

    def pop_dirty(self) -> list[TreeNode]:
        """변경된 노드를 반환하고 dirty 집합을 비웁니다.

        Return the modified nodes and clear the dirty set.
        """
        nodes = [self._nodes[k] for k in self.dirty if k in self._nodes]
        self.dirty.clear()
        return nodes
