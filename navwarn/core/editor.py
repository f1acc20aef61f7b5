"""트리 편집 연산 모듈.

Tree-edit operations over a ``TreeSnapshot``.

The editor is the caller that keeps both invariants after every mutation:
it recomputes the lineage of a moved subtree through ``PathEncoder`` and
applies activation changes through ``ActivationPropagator``. All nodes it
touches end up in ``snapshot.dirty``.
"""

from typing import Hashable

from navwarn.core.activation import ActivationPropagator
from navwarn.core.errors import HasChildren, InvalidReparent, MissingKey
from navwarn.core.lineage import PathEncoder
from navwarn.core.tree import TreeNode, TreeSnapshot


class TreeEditor:
    """삽입/이동/활성화/삭제를 불변식을 유지하며 수행합니다.

    Insert, move, (de)activate and remove nodes while maintaining the
    lineage and activation invariants.
    """

    def __init__(self, snapshot: TreeSnapshot) -> None:
        self.snapshot: TreeSnapshot = snapshot
        self.encoder: PathEncoder = PathEncoder(snapshot)
        self.propagator: ActivationPropagator = ActivationPropagator(snapshot)

    def refresh_lineage(self, node: TreeNode, force: bool = False) -> int:
        """노드와, 변경된 경우 모든 자손의 lineage를 다시 계산합니다.

        Recompute the node's lineage and, when it changed (or ``force``),
        the lineage of every descendant.

        Returns:
            int: lineage가 바뀐 노드 수 (Number of nodes whose lineage changed)
        """
        changed = int(self.encoder.update_lineage(node))
        if not changed and not force:
            return 0
        for descendant in self.snapshot.descendants(node):
            changed += int(self.encoder.update_lineage(descendant))
        return changed

    def insert(self, node: TreeNode, active: bool | None = None) -> TreeNode:
        """새 노드를 삽입합니다.

        Insert a new node. Without an explicit ``active`` the node is active
        unless its parent is inactive; an explicit ``True`` activates the
        ancestors as well.

        Raises:
            MissingKey: 키가 할당되지 않았을 때 (Node has no key)
            UnknownNode: 부모가 없을 때 (Parent does not exist)
        """
        if node.key is None:
            raise MissingKey("Cannot insert a node without a key")
        parent = self.snapshot.get(node.parent_key) if node.parent_key is not None else None

        node.active = parent.active if parent is not None else True
        self.snapshot.add(node)
        self.encoder.update_lineage(node)

        if active is not None and active != node.active:
            self.propagator.set_active(node, active)
        return node

    def reparent(self, key: Hashable, parent_key: Hashable | None) -> TreeNode:
        """노드를 새 부모 아래로 옮기고 하위 트리 lineage를 다시 계산합니다.

        Move a node (with its subtree) under ``parent_key`` or to the root
        level when ``parent_key`` is None. An active node moved under an
        inactive parent is deactivated together with its subtree.

        Raises:
            UnknownNode: 노드 또는 새 부모가 없을 때 (Node or target parent unknown)
            InvalidReparent: 자기 자신/자손 아래로 옮길 때, 트리는 변경되지 않음
                             (Target is the node or a descendant; tree untouched)
        """
        node = self.snapshot.get(key)
        parent = self.snapshot.get(parent_key) if parent_key is not None else None

        if parent is not None:
            if parent.key == node.key or any(a.key == node.key for a in self.snapshot.ancestors(parent)):
                raise InvalidReparent(node.key, parent.key)

        if node.parent_key == parent_key:
            return node

        self.snapshot.attach(node, parent_key)
        self.refresh_lineage(node)

        if parent is not None and not parent.active and node.active:
            self.propagator.set_active(node, False)
        return node

    def set_active(self, key: Hashable, value: bool) -> list[Hashable]:
        """노드의 활성 상태를 변경하고 전파합니다 — Toggle and propagate activation."""
        return self.propagator.set_active(self.snapshot.get(key), value)

    def remove(self, key: Hashable) -> TreeNode:
        """자식이 없는 노드를 제거합니다.

        Remove a node that has no children.

        Raises:
            HasChildren: 자식이 남아 있을 때 (Children must be removed or moved first)
        """
        node = self.snapshot.get(key)
        if node.child_keys:
            raise HasChildren(node.key, len(node.child_keys))
        self.snapshot.discard(node)
        return node

    def rebuild(self) -> int:
        """모든 루트에서 lineage를 강제로 다시 계산합니다.

        Recompute every lineage from the roots down. Nodes that are not
        reachable from a root sit on a parent cycle and are reported as such.

        Returns:
            int: lineage가 바뀐 노드 수 (Number of nodes whose lineage changed)

        Raises:
            CycleDetected: 루트에서 닿지 않는 노드가 있을 때 (Some nodes form a cycle)
        """
        changed = 0
        reached = 0
        for root in self.snapshot.roots():
            changed += self.refresh_lineage(root, force=True)
            reached += 1 + sum(1 for _ in self.snapshot.descendants(root))
        if reached != len(self.snapshot):
            # 루트에 닿지 않는 체인은 순환뿐 — A chain that never reaches a root must cycle
            for node in self.snapshot:
                self.encoder.compute_lineage(node)
        return changed
