"""활성 상태 전파 모듈.

Activation propagation.

Invariant: an active node has only active ancestors, an inactive node has only
inactive descendants. Activation flows upward, deactivation flows downward, and
both walks stop as soon as they reach a node that already satisfies the
invariant, so the cost is proportional to the number of nodes that change.
"""

from typing import Hashable

from navwarn.core.errors import CycleDetected
from navwarn.core.tree import TreeNode, TreeSnapshot


class ActivationPropagator:
    """단일 노드의 활성 상태 변경을 트리 전체에 일관되게 적용합니다.

    Applies a single node's activation change consistently across the tree.
    Runs in memory inside the caller's transaction.
    """

    def __init__(self, snapshot: TreeSnapshot) -> None:
        self.snapshot: TreeSnapshot = snapshot

    def set_active(self, node: TreeNode, value: bool) -> list[Hashable]:
        """노드의 활성 상태를 설정하고 불변식을 유지하도록 전파합니다.

        Set the node's flag and propagate it.

        Args:
            node: 대상 노드 (Node whose flag changes)
            value: 새 활성 상태 (New activation flag)

        Returns:
            list[Hashable]: 상태가 실제로 바뀐 노드 키 목록 (Keys whose flag changed)
        """
        changed: list[Hashable] = []
        if node.active != value:
            node.active = value
            changed.append(node.key)

        if value:
            changed.extend(self._activate_ancestors(node))
        else:
            changed.extend(self._deactivate_descendants(node))

        for key in changed:
            self.snapshot.dirty.add(key)
        return changed

    def _activate_ancestors(self, node: TreeNode) -> list[Hashable]:
        # 이미 활성인 조상 위는 불변식에 의해 모두 활성 — Everything above an active ancestor is active
        changed: list[Hashable] = []
        for ancestor in self.snapshot.ancestors(node):
            if ancestor.active:
                break
            ancestor.active = True
            changed.append(ancestor.key)
        return changed

    def _deactivate_descendants(self, node: TreeNode) -> list[Hashable]:
        # 이미 비활성인 노드 아래는 불변식에 의해 모두 비활성 — Below an inactive node everything is inactive
        changed: list[Hashable] = []
        seen: set[Hashable] = {node.key}
        stack = list(self.snapshot.children_of(node))
        while stack:
            child = stack.pop()
            if child.key in seen:
                raise CycleDetected(child.key)
            seen.add(child.key)
            if not child.active:
                continue
            child.active = False
            changed.append(child.key)
            stack.extend(self.snapshot.children_of(child))
        return changed
