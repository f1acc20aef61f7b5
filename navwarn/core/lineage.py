"""물질화 경로(lineage) 계산 모듈.

Materialized path ("lineage") encoding.

A node's lineage is ``/`` followed by ``key/`` for every node from the root
down to and including the node itself, e.g. ``/root/child/grandchild/``.
The trailing delimiter after every key is what makes a plain string prefix
test equivalent to an ancestor-or-self test (``/1/`` is not a prefix of
``/12/``).
"""

from typing import Hashable

from navwarn.core.errors import CycleDetected, MissingKey
from navwarn.core.tree import TreeNode, TreeSnapshot

# 경로 구분자 — Path delimiter shared with the subtree matcher
DELIMITER = "/"


def format_lineage(keys: list[Hashable]) -> str:
    """루트부터 노드까지의 키 목록을 lineage 문자열로 변환합니다.

    Format a root-to-node key chain as a lineage string.
    """
    return DELIMITER + "".join(f"{key}{DELIMITER}" for key in keys)


class PathEncoder:
    """트리 노드의 lineage를 계산하고 검증하는 인코더.

    Computes and refreshes lineages for the nodes of a snapshot.
    Recomputing descendants after a change is the caller's job: ``update_lineage``
    only reports whether the node's own lineage changed.
    """

    def __init__(self, snapshot: TreeSnapshot) -> None:
        self.snapshot: TreeSnapshot = snapshot

    def compute_lineage(self, node: TreeNode) -> str:
        """현재 부모 체인으로부터 lineage를 계산합니다 (저장하지 않음).

        Compute the lineage from the node's parent chain at call time.

        Args:
            node: 대상 노드 (Node to encode)

        Returns:
            str: ``/root/.../node/`` 형식의 경로 (Lineage string)

        Raises:
            MissingKey: 노드에 키가 없을 때 (Node has no key yet)
            CycleDetected: 부모 체인이 순환할 때 (Parent chain revisits a node)
        """
        if node.key is None:
            raise MissingKey("Cannot compute the lineage of a node without a key")

        chain: list[Hashable] = [node.key]
        seen: set[Hashable] = {node.key}
        parent_key = node.parent_key
        while parent_key is not None:
            if parent_key in seen:
                raise CycleDetected(parent_key)
            seen.add(parent_key)
            chain.append(parent_key)
            parent_key = self.snapshot.get(parent_key).parent_key

        chain.reverse()
        return format_lineage(chain)

    def update_lineage(self, node: TreeNode) -> bool:
        """lineage를 다시 계산하고 달라졌으면 저장합니다.

        Recompute the lineage and store it when it differs.

        Returns:
            bool: 변경 여부 — True이면 자손의 lineage도 다시 계산해야 함
                  (True when changed; descendants must then be recomputed too)
        """
        lineage = self.compute_lineage(node)
        if lineage == node.lineage:
            return False
        node.lineage = lineage
        self.snapshot.mark_dirty(node)
        return True
