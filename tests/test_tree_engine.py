"""계층 엔진 단위 테스트 — lineage, 활성 상태 전파, 하위 트리 매칭, 트리 편집.

Hierarchy engine unit tests — Lineage encoding, activation propagation,
subtree matching and tree edits on an in-memory snapshot.
"""

from dataclasses import dataclass, field

import pytest

from navwarn.core import (
    CycleDetected,
    HasChildren,
    InvalidReparent,
    MissingKey,
    PathEncoder,
    SubtreeMatcher,
    TreeEditor,
    TreeNode,
    TreeSnapshot,
    UnknownNode,
    format_lineage,
    is_within,
    matches,
)


def build_tree(*edges: tuple[str, str | None], active: dict[str, bool] | None = None) -> TreeEditor:
    """(key, parent) 목록으로 트리를 만들고 lineage를 계산합니다."""
    active = active or {}
    snapshot = TreeSnapshot(
        TreeNode(key=key, parent_key=parent, active=active.get(key, True), natural_key=key)
        for key, parent in edges
    )
    editor = TreeEditor(snapshot)
    editor.rebuild()
    snapshot.pop_dirty()
    return editor


@dataclass
class Entity:
    region_lineages: list[str] = field(default_factory=list)


class TestPathEncoder:
    """lineage 계산 테스트."""

    def test_root_lineage(self):
        """루트의 lineage는 /key/."""
        editor = build_tree(("A", None))
        assert editor.snapshot.get("A").lineage == "/A/"

    def test_nested_lineage(self):
        """자손의 lineage는 루트부터의 키 체인."""
        editor = build_tree(("A", None), ("B", "A"), ("C", "B"))
        assert editor.snapshot.get("C").lineage == "/A/B/C/"

    def test_format_lineage(self):
        assert format_lineage([1, 12]) == "/1/12/"

    def test_update_lineage_reports_change(self):
        """lineage가 이미 맞으면 False, 다르면 저장 후 True."""
        editor = build_tree(("A", None))
        encoder = PathEncoder(editor.snapshot)
        node = editor.snapshot.get("A")
        assert encoder.update_lineage(node) is False

        node.lineage = "/stale/"
        assert encoder.update_lineage(node) is True
        assert node.lineage == "/A/"
        assert "A" in editor.snapshot.dirty

    def test_missing_key(self):
        """키가 없는 노드는 MissingKey."""
        encoder = PathEncoder(TreeSnapshot())
        with pytest.raises(MissingKey):
            encoder.compute_lineage(TreeNode(key=None))

    def test_cycle_detected(self):
        """부모 체인이 순환하면 CycleDetected."""
        snapshot = TreeSnapshot([TreeNode(key="A", parent_key="B"), TreeNode(key="B", parent_key="A")])
        with pytest.raises(CycleDetected):
            PathEncoder(snapshot).compute_lineage(snapshot.get("A"))

    def test_unknown_parent(self):
        """존재하지 않는 부모를 참조하면 UnknownNode."""
        with pytest.raises(UnknownNode):
            TreeSnapshot([TreeNode(key="A", parent_key="missing")])


class TestActivation:
    """활성 상태 전파 테스트."""

    def test_deactivate_cascades_down(self):
        """B 비활성화 시 C도 비활성, A는 유지."""
        editor = build_tree(("A", None), ("B", "A"), ("C", "B"))
        changed = editor.set_active("B", False)

        assert set(changed) == {"B", "C"}
        assert editor.snapshot.get("A").active is True
        assert editor.snapshot.get("B").active is False
        assert editor.snapshot.get("C").active is False

    def test_activate_cascades_up(self):
        """C 활성화 시 비활성 조상 모두 활성화."""
        editor = build_tree(("A", None), ("B", "A"), ("C", "B"), active={"A": False, "B": False, "C": False})
        changed = editor.set_active("C", True)

        assert set(changed) == {"A", "B", "C"}
        assert all(node.active for node in editor.snapshot)

    def test_activate_does_not_touch_siblings(self):
        """활성화는 형제/자손에 영향 없음."""
        editor = build_tree(
            ("A", None), ("B", "A"), ("C", "A"), ("D", "B"),
            active={"A": False, "B": False, "C": False, "D": False},
        )
        editor.set_active("B", True)
        assert editor.snapshot.get("C").active is False
        assert editor.snapshot.get("D").active is False

    def test_deactivate_idempotent(self):
        """이미 비활성인 노드를 다시 비활성화하면 변경 없음."""
        editor = build_tree(("A", None), ("B", "A"), active={"B": False})
        assert editor.set_active("B", False) == []

    def test_invariant_after_mixed_changes(self):
        """여러 변경 후에도 활성 노드의 조상은 모두 활성."""
        editor = build_tree(("A", None), ("B", "A"), ("C", "B"), ("D", "A"))
        editor.set_active("A", False)
        editor.set_active("C", True)
        editor.set_active("D", False)

        snapshot = editor.snapshot
        for node in snapshot:
            if node.active:
                assert all(a.active for a in snapshot.ancestors(node))
            else:
                assert not any(d.active for d in snapshot.descendants(node))


class TestSubtreeMatching:
    """하위 트리 매칭 테스트."""

    def test_prefix_is_segment_aware(self):
        """/1/ 은 /12/ 의 조상이 아님."""
        assert is_within("/12/", "/1/") is False
        assert is_within("/1/2/", "/1/") is True
        assert is_within("/1/", "/1/") is True

    def test_entity_in_subtree(self):
        entity = Entity(["/A/B/C/"])
        assert matches(entity, ["/A/B/"]) is True
        assert matches(entity, ["/A/D/"]) is False

    def test_any_region_matches(self):
        """엔티티의 영역 중 하나라도 하위 트리에 있으면 매칭."""
        entity = Entity(["/X/", "/A/B/"])
        assert matches(entity, ["/A/"]) is True

    def test_empty_roots_match_everything(self):
        """영역 루트가 없으면 무조건 매칭."""
        assert matches(Entity([]), []) is True

    def test_entity_without_regions(self):
        assert matches(Entity([]), ["/A/"]) is False

    def test_matcher_accepts_nodes(self):
        """노드 객체를 영역 루트로 사용."""
        editor = build_tree(("A", None), ("B", "A"))
        matcher = SubtreeMatcher([editor.snapshot.get("B")])
        entities = [Entity(["/A/B/"]), Entity(["/A/"]), Entity(["/A/B/X/"])]
        assert matcher.filter(entities) == [entities[0], entities[2]]

    def test_malformed_lineage(self):
        with pytest.raises(ValueError):
            SubtreeMatcher(["A/B"])

    def test_region_without_lineage(self):
        with pytest.raises(MissingKey):
            SubtreeMatcher([TreeNode(key="A")])


class TestTreeEditor:
    """트리 편집 연산 테스트."""

    def test_insert_under_active_parent(self):
        editor = build_tree(("A", None))
        node = editor.insert(TreeNode(key="B", parent_key="A"))
        assert node.active is True
        assert node.lineage == "/A/B/"
        assert "B" in editor.snapshot.get("A").child_keys

    def test_insert_inherits_inactive_parent(self):
        """비활성 부모 아래 삽입 시 기본 비활성."""
        editor = build_tree(("A", None), active={"A": False})
        node = editor.insert(TreeNode(key="B", parent_key="A"))
        assert node.active is False

    def test_insert_explicit_active_activates_ancestors(self):
        """명시적으로 활성 삽입하면 조상도 활성화."""
        editor = build_tree(("A", None), active={"A": False})
        editor.insert(TreeNode(key="B", parent_key="A"), active=True)
        assert editor.snapshot.get("A").active is True

    def test_insert_unknown_parent(self):
        editor = build_tree(("A", None))
        with pytest.raises(UnknownNode):
            editor.insert(TreeNode(key="B", parent_key="missing"))

    def test_insert_without_key(self):
        editor = build_tree(("A", None))
        with pytest.raises(MissingKey):
            editor.insert(TreeNode(key=None, parent_key="A"))

    def test_reparent_recomputes_subtree(self):
        """C를 B에서 D로 옮기면 C와 자손의 lineage가 /D/C/ 로 바뀜."""
        editor = build_tree(("A", None), ("B", "A"), ("C", "B"), ("E", "C"), ("D", None))
        editor.reparent("C", "D")

        snapshot = editor.snapshot
        assert snapshot.get("C").lineage == "/D/C/"
        assert snapshot.get("E").lineage == "/D/C/E/"
        assert "C" not in snapshot.get("B").child_keys
        assert snapshot.get("D").child_keys == ["C"]
        assert {"C", "E"} <= snapshot.dirty

    def test_reparent_to_root(self):
        editor = build_tree(("A", None), ("B", "A"))
        editor.reparent("B", None)
        assert editor.snapshot.get("B").lineage == "/B/"

    def test_reparent_under_inactive_parent_deactivates(self):
        """비활성 부모 아래로 옮기면 하위 트리 비활성화."""
        editor = build_tree(("A", None), ("B", "A"), ("C", "B"), ("D", None), active={"D": False})
        editor.reparent("B", "D")
        assert editor.snapshot.get("B").active is False
        assert editor.snapshot.get("C").active is False

    def test_reparent_under_descendant_rejected(self):
        """자손 아래로 옮기면 InvalidReparent, 트리 변경 없음."""
        editor = build_tree(("A", None), ("B", "A"), ("C", "B"))
        with pytest.raises(InvalidReparent):
            editor.reparent("A", "C")
        with pytest.raises(InvalidReparent):
            editor.reparent("B", "B")
        assert editor.snapshot.get("A").parent_key is None
        assert editor.snapshot.get("C").lineage == "/A/B/C/"
        assert not editor.snapshot.dirty

    def test_reparent_same_parent_is_noop(self):
        editor = build_tree(("A", None), ("B", "A"))
        editor.reparent("B", "A")
        assert not editor.snapshot.dirty

    def test_remove_leaf(self):
        editor = build_tree(("A", None), ("B", "A"))
        editor.remove("B")
        assert "B" not in editor.snapshot
        assert editor.snapshot.get("A").child_keys == []

    def test_remove_with_children(self):
        """자식이 있는 노드 삭제 시 HasChildren."""
        editor = build_tree(("A", None), ("B", "A"))
        with pytest.raises(HasChildren):
            editor.remove("A")
        assert "A" in editor.snapshot

    def test_rebuild_repairs_stale_lineage(self):
        """잘못된 lineage를 전체 재계산으로 복구."""
        editor = build_tree(("A", None), ("B", "A"), ("C", "B"))
        editor.snapshot.get("B").lineage = "/wrong/"
        editor.snapshot.get("C").lineage = None

        assert editor.rebuild() == 2
        assert editor.snapshot.get("C").lineage == "/A/B/C/"

    def test_rebuild_detects_cycle(self):
        """루트에서 닿지 않는 순환 체인은 CycleDetected."""
        snapshot = TreeSnapshot([
            TreeNode(key="A"),
            TreeNode(key="B", parent_key="C"),
            TreeNode(key="C", parent_key="B"),
        ])
        with pytest.raises(CycleDetected):
            TreeEditor(snapshot).rebuild()
