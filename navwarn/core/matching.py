"""하위 트리 매칭 모듈.

Subtree matching by lineage prefix.

An entity belongs to the subtree rooted at R when one of the lineages of the
regions it is associated with starts with R's lineage. Because every key in a
lineage is followed by the delimiter, the string prefix test is an
ancestor-or-self test and maps onto an index-friendly ``LIKE 'prefix%'`` scan
in the backing store.
"""

from typing import Any, Callable, Iterable, Sequence, TypeVar

from navwarn.core.errors import MissingKey
from navwarn.core.lineage import DELIMITER

T = TypeVar("T")


def lineage_of(region: Any) -> str:
    """노드 또는 lineage 문자열에서 검증된 lineage를 꺼냅니다.

    Return the validated lineage of a region given as a node or a string.

    Raises:
        MissingKey: lineage가 아직 계산되지 않았을 때 (Lineage not computed yet)
        ValueError: 양 끝에 구분자가 없을 때 (Not delimited on both ends)
    """
    lineage = region if isinstance(region, str) else region.lineage
    if lineage is None:
        raise MissingKey("Region has no lineage")
    if not (lineage.startswith(DELIMITER) and lineage.endswith(DELIMITER)) or lineage == DELIMITER:
        raise ValueError(f"Malformed lineage '{lineage}'")
    return lineage


def is_within(lineage: str, region_lineage: str) -> bool:
    """lineage가 region의 자기 자신 또는 자손 경로인지 확인합니다.

    Ancestor-or-self test on two delimited lineages.
    """
    return lineage_of(lineage).startswith(lineage_of(region_lineage))


def region_lineages(entity: Any) -> Iterable[str]:
    """엔티티가 속한 영역의 lineage 목록 — Default accessor for ``entity.region_lineages``."""
    return entity.region_lineages


class SubtreeMatcher:
    """영역 루트 목록에 대해 엔티티 소속 여부를 판단하는 매처.

    Matches entities against a fixed list of region roots.
    An empty root list means "unrestricted": everything matches.

    Args:
        region_roots: 영역 루트 노드 또는 lineage 문자열 (Region roots as nodes or lineages)
        lineages_of: 엔티티의 영역 lineage 접근자 (Accessor for an entity's region lineages)
    """

    def __init__(
        self,
        region_roots: Sequence[Any],
        lineages_of: Callable[[Any], Iterable[str]] = region_lineages,
    ) -> None:
        self.prefixes: list[str] = [lineage_of(r) for r in region_roots]
        self.lineages_of = lineages_of

    def matches(self, entity: Any) -> bool:
        if not self.prefixes:
            return True
        return any(
            lineage_of(lineage).startswith(prefix)
            for lineage in self.lineages_of(entity)
            for prefix in self.prefixes
        )

    def filter(self, entities: Iterable[T]) -> list[T]:
        """매칭되는 엔티티만 입력 순서대로 반환합니다 — Keep matching entities in input order."""
        return [e for e in entities if self.matches(e)]


def matches(entity: Any, region_roots: Sequence[Any]) -> bool:
    """엔티티가 주어진 영역 루트 중 하나의 하위 트리에 속하는지 확인합니다.

    True if any of the entity's region lineages lies in the subtree of any
    region root; vacuously true for an empty ``region_roots``.
    """
    return SubtreeMatcher(region_roots).matches(entity)
