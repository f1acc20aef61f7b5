"""변경 감지 모듈.

Change detection between an incoming candidate and its persisted counterpart.

Each record type exposes a comparable snapshot of its significant fields
(``significant_fields()``); the detector compares only the fields the caller
declared and never looks at housekeeping columns such as generated ids,
timestamps or version counters.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Protocol

# 비교에서 항상 제외되는 관리용 필드 — Housekeeping fields never compared
HOUSEKEEPING_FIELDS: frozenset[str] = frozenset({"id", "created_at", "updated_at", "version"})


class ChangeKind(str, Enum):
    """후보 레코드 분류 결과 — Classification of a candidate record."""

    NEW = "new"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


class SignificantFields(Protocol):
    """비교 가능한 유의미 필드 스냅샷을 제공하는 레코드.

    A record that can describe itself as a comparable snapshot.
    Unordered collections must be returned as ``set`` / ``dict``,
    references by natural key.
    """

    def significant_fields(self) -> Mapping[str, Any]: ...


def _own_fields(record: Any) -> Mapping[str, Any]:
    return record.significant_fields()


def normalize(value: Any) -> Any:
    """비교 전에 값을 정규화합니다 — Normalize values before comparison.

    Datetimes are compared in UTC; naive values are taken to be UTC already
    (some drivers drop the timezone on the way back from the database).
    Lists and tuples keep their order; only sets compare order-independently.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, (set, frozenset)):
        return frozenset(normalize(v) for v in value)
    if isinstance(value, (list, tuple)):
        return tuple(normalize(v) for v in value)
    if isinstance(value, Mapping):
        return {k: normalize(v) for k, v in value.items()}
    return value


class ChangeDetector:
    """선언된 유의미 필드만 비교해 후보를 분류합니다.

    Classifies a candidate as new, changed or unchanged by comparing the
    declared significant fields only.

    Args:
        significant: 비교할 필드 이름 (Field names to compare)
        fields_of: 저장된 레코드의 스냅샷 함수, 기본은 ``record.significant_fields()``
                   (Snapshot function for persisted records)

    Raises:
        ValueError: 관리용 필드가 선언되었거나 필드가 비어 있을 때
                    (A housekeeping field was declared, or no field at all)
    """

    def __init__(
        self,
        significant: Iterable[str],
        fields_of: Callable[[Any], Mapping[str, Any]] | None = None,
    ) -> None:
        self.fields: tuple[str, ...] = tuple(significant)
        if not self.fields:
            raise ValueError("At least one significant field is required")
        housekeeping = HOUSEKEEPING_FIELDS.intersection(self.fields)
        if housekeeping:
            raise ValueError(f"Housekeeping fields cannot be significant: {sorted(housekeeping)}")
        self.fields_of: Callable[[Any], Mapping[str, Any]] = fields_of or _own_fields

    def _snapshot(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        return {name: normalize(fields.get(name)) for name in self.fields}

    def diff(self, candidate: SignificantFields, persisted: Any) -> list[str]:
        """값이 다른 유의미 필드 이름을 반환합니다.

        Return the names of the significant fields whose values differ.
        """
        theirs = self._snapshot(candidate.significant_fields())
        ours = self._snapshot(self.fields_of(persisted))
        return [name for name in self.fields if theirs[name] != ours[name]]

    def classify(self, candidate: SignificantFields, persisted: Any | None) -> ChangeKind:
        """후보를 저장된 레코드와 비교해 분류합니다.

        Args:
            candidate: 들어온 후보 레코드 (Incoming candidate)
            persisted: 같은 자연키의 저장 레코드, 없으면 None (Persisted counterpart or None)

        Returns:
            ChangeKind: NEW / CHANGED / UNCHANGED
        """
        if persisted is None:
            return ChangeKind.NEW
        if self.diff(candidate, persisted):
            return ChangeKind.CHANGED
        return ChangeKind.UNCHANGED
