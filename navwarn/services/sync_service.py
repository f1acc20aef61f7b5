"""일괄 동기화 서비스 — 레코드 유형별 동기화 대상과 실행.

Sync Service — Per record type sync targets and their execution.
Adapts the repositories and the async session to the record store protocol
consumed by ``BulkSynchronizer``: SQLAlchemy errors become ``StoreFailure``
and store transactions are SAVEPOINTs (``session.begin_nested()``).
"""

import uuid
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import Any, Mapping, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from navwarn.config import settings
from navwarn.core.changes import ChangeKind, normalize
from navwarn.core.errors import StoreFailure, UnknownNode
from navwarn.core.sync import BulkSynchronizer, FailurePolicy, SyncResult
from navwarn.core.tree import TreeNode, desc_map
from navwarn.models.area import Area, AreaDesc
from navwarn.models.aton import AtonNode, AtonTag
from navwarn.models.category import CategoryDesc
from navwarn.models.message_tag import MessageTag, MessageTagMessage
from navwarn.models.transmitter import NavtexTransmitter
from navwarn.repositories.aton_repository import aton_repository
from navwarn.repositories.base import BaseRepository
from navwarn.repositories.message_tag_repository import message_tag_repository
from navwarn.repositories.transmitter_repository import transmitter_repository
from navwarn.repositories.tree_repository import TreeRepository, area_repository, category_repository
from navwarn.schemas.aton import AtonSyncItem
from navwarn.schemas.message_tag import MessageTagSyncItem
from navwarn.schemas.transmitter import TransmitterSyncItem
from navwarn.schemas.tree import TreeSyncItem
from navwarn.services.tree_service import TreeState, replace_children
from navwarn.utils.logger import get_logger

logger = get_logger(__name__)


@contextmanager
def store_errors() -> Iterator[None]:
    """SQLAlchemy 오류를 ``StoreFailure``로 변환합니다 — Translate SQLAlchemy errors."""
    try:
        yield
    except SQLAlchemyError as exc:
        detail = str(getattr(exc, "orig", None) or exc).splitlines()[0]
        raise StoreFailure(f"{type(exc).__name__}: {detail}") from exc


class RepositorySyncTarget:
    """레포지토리 기반 평면 레코드 동기화 대상.

    Sync target for flat records stored through a ``BaseRepository``.
    Subclasses declare ``name`` and ``significant`` and implement ``build``
    and ``merge``.

    Args:
        db: 비동기 데이터베이스 세션 (Async database session)
        repository: 레코드 레포지토리 (Record repository)
    """

    name: str = "records"
    significant: tuple[str, ...] = ()

    def __init__(self, db: AsyncSession, repository: BaseRepository[Any]) -> None:
        self.db: AsyncSession = db
        self.repository: BaseRepository[Any] = repository

    # --- record store ---

    async def find_by_key(self, key: str) -> Any | None:
        with store_errors():
            return await self.repository.get_by_key(self.db, key)

    async def find_by_prefix(self, prefix: str) -> list[Any]:
        with store_errors():
            return await self.repository.get_by_key_prefix(self.db, prefix)

    async def save(self, record: Any) -> None:
        self.db.add(record)

    async def flush(self) -> None:
        with store_errors():
            await self.db.flush()

    async def delete(self, record: Any) -> None:
        with store_errors():
            await self.db.delete(record)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """SAVEPOINT 트랜잭션 — Nested transaction rolled back on any error."""
        try:
            with store_errors():
                async with self.db.begin_nested():
                    yield
        except Exception:
            await self.after_rollback()
            raise

    async def after_rollback(self) -> None:
        """롤백 후 메모리 상태 복구 훅 — Hook to resync in-memory state after a rollback."""

    # --- sync target ---

    def natural_key(self, candidate: Any) -> str:
        return getattr(candidate, self.repository.key_column)

    def parent_natural_key(self, candidate: Any) -> str | None:
        return None

    def significant_fields(self, record: Any) -> Mapping[str, Any]:
        return record.significant_fields()

    async def build(self, candidate: Any) -> Any:
        raise NotImplementedError

    async def merge(self, record: Any, candidate: Any) -> None:
        raise NotImplementedError

    async def after_write(self, record: Any, candidate: Any, kind: ChangeKind) -> None:
        """생성/수정 후 훅 — Hook run after a create or an in-place update."""


class AtonSyncTarget(RepositorySyncTarget):
    """항로표지 동기화 대상 — AtoNs keyed by ``aton_uid``."""

    name = "AtoNs"
    significant = ("lat", "lon", "tags")

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, aton_repository)

    async def build(self, candidate: AtonSyncItem) -> AtonNode:
        return AtonNode(
            id=uuid.uuid4(),
            aton_uid=candidate.aton_uid,
            lat=candidate.lat,
            lon=candidate.lon,
            tags=[AtonTag(k=k, v=v) for k, v in candidate.tag_map().items()],
        )

    async def merge(self, record: AtonNode, candidate: AtonSyncItem) -> None:
        record.lat = candidate.lat
        record.lon = candidate.lon
        replace_children(record.tags, candidate.tag_map(), "k", "v", lambda k, v: AtonTag(k=k, v=v))


class MessageTagSyncTarget(RepositorySyncTarget):
    """메시지 태그 동기화 대상 — Message tags keyed by ``tag_id``."""

    name = "message tags"
    significant = ("name", "tag_type", "expiry_date", "message_uids")

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, message_tag_repository)

    async def build(self, candidate: MessageTagSyncItem) -> MessageTag:
        return MessageTag(
            id=uuid.uuid4(),
            tag_id=candidate.tag_id,
            name=candidate.name,
            tag_type=candidate.tag_type,
            expiry_date=normalize(candidate.expiry_date),
            messages=[MessageTagMessage(message_uid=uid) for uid in dict.fromkeys(candidate.message_uids)],
        )

    async def merge(self, record: MessageTag, candidate: MessageTagSyncItem) -> None:
        record.name = candidate.name
        record.tag_type = candidate.tag_type
        record.expiry_date = normalize(candidate.expiry_date)
        replace_children(
            record.messages,
            dict.fromkeys(candidate.message_uids),
            "message_uid",
            None,
            lambda uid, _: MessageTagMessage(message_uid=uid),
        )


class TransmitterSyncTarget(RepositorySyncTarget):
    """NAVTEX 송신소 동기화 대상 — Transmitters keyed by name.

    Covered areas are referenced by MRN and must already exist.
    """

    name = "NAVTEX transmitters"
    significant = ("active", "areas")

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, transmitter_repository)

    async def _areas(self, mrns: Sequence[str]) -> list[Area]:
        wanted = list(dict.fromkeys(mrns))
        with store_errors():
            areas = await area_repository.get_by_keys(self.db, wanted)
        found = {area.mrn for area in areas}
        for mrn in wanted:
            if mrn not in found:
                raise UnknownNode(mrn)
        return areas

    async def build(self, candidate: TransmitterSyncItem) -> NavtexTransmitter:
        return NavtexTransmitter(
            id=uuid.uuid4(),
            name=candidate.name,
            active=candidate.active,
            areas=await self._areas(candidate.areas),
        )

    async def merge(self, record: NavtexTransmitter, candidate: TransmitterSyncItem) -> None:
        record.active = candidate.active
        record.areas = await self._areas(candidate.areas)


class TreeSyncTarget(RepositorySyncTarget):
    """영역/카테고리 트리 동기화 대상.

    Sync target for a tree (areas or categories) keyed by MRN. The whole tree
    is held in a ``TreeState`` for the pass; every create or update is
    followed by the tree edit that keeps lineage and activation consistent
    (insert, reparent, activation change), and the touched nodes are written
    back to their rows before the next flush.

    Args:
        db: 비동기 데이터베이스 세션 (Async database session)
        repository: 트리 레포지토리 (Tree repository)
        desc_model: 언어별 이름 모델 클래스 (Localized name model class)
        name: 로그용 이름 (Name used in logs)
    """

    significant = ("mrn", "active", "descs", "parent")

    def __init__(self, db: AsyncSession, repository: TreeRepository[Any], desc_model: type[Any], name: str) -> None:
        super().__init__(db, repository)
        self.desc_model: type[Any] = desc_model
        self.name: str = name
        self.state: TreeState[Any] = TreeState(repository)

    async def load(self, refresh: bool = False) -> "TreeSyncTarget":
        with store_errors():
            await self.state.load(self.db, refresh=refresh)
        return self

    async def after_rollback(self) -> None:
        # SAVEPOINT 롤백 후 세션 상태와 스냅샷을 다시 맞춤 — Resync rows and snapshot with the database
        logger.debug("Reloading %s after rollback", self.name)
        await self.load(refresh=True)

    def _new_desc(self, lang: str, name: str) -> Any:
        return self.desc_model(lang=lang, name=name)

    def _parent_id(self, parent_mrn: str | None) -> uuid.UUID | None:
        if parent_mrn is None:
            return None
        parent = self.state.by_mrn.get(parent_mrn)
        if parent is None:
            raise UnknownNode(parent_mrn)
        return parent.id

    async def find_by_key(self, key: str) -> Any | None:
        return self.state.by_mrn.get(key)

    async def find_by_prefix(self, prefix: str) -> list[Any]:
        with store_errors():
            return await self.repository.get_subtree(self.db, prefix)

    async def save(self, record: Any) -> None:
        self.db.add(record)
        self.state.add_row(record)

    async def delete(self, record: Any) -> None:
        self.state.editor.remove(record.id)
        self.state.discard_row(record)
        await super().delete(record)

    def parent_natural_key(self, candidate: TreeSyncItem) -> str | None:
        return candidate.parent_mrn

    def significant_fields(self, record: Any) -> Mapping[str, Any]:
        node = self.state.snapshot.get(record.id)
        return {
            "mrn": record.mrn,
            "active": node.active,
            "descs": desc_map(record.descs),
            "parent": self.state.parent_mrn(node),
        }

    async def build(self, candidate: TreeSyncItem) -> Any:
        return self.repository.model(
            id=uuid.uuid4(),
            mrn=candidate.mrn,
            parent_id=self._parent_id(candidate.parent_mrn),
            active=True,
            descs=[self._new_desc(d.lang, d.name) for d in candidate.descs],
        )

    async def merge(self, record: Any, candidate: TreeSyncItem) -> None:
        replace_children(record.descs, desc_map(candidate.descs), "lang", "name", self._new_desc)

    async def after_write(self, record: Any, candidate: TreeSyncItem, kind: ChangeKind) -> None:
        editor = self.state.editor
        if kind is ChangeKind.NEW:
            node = TreeNode(
                key=record.id,
                parent_key=record.parent_id,
                natural_key=record.mrn,
                descs=desc_map(candidate.descs),
            )
            editor.insert(node, active=candidate.active)
        else:
            node = self.state.snapshot.get(record.id)
            editor.reparent(node.key, self._parent_id(candidate.parent_mrn))
            # 명시적 활성 상태가 이동으로 인한 비활성화보다 우선 — The candidate's flag wins over a move-induced change
            if node.active != candidate.active:
                editor.set_active(node.key, candidate.active)
            node.descs = desc_map(candidate.descs)
        self.state.write_back()


class SyncService:
    """레코드 유형별 일괄 동기화를 실행하는 서비스.

    Service running bulk synchronization per record type with the batch size
    and failure policy from the settings.
    """

    def _synchronizer(self, target: RepositorySyncTarget) -> BulkSynchronizer:
        return BulkSynchronizer(
            target,
            batch_size=settings.SYNC_BATCH_SIZE,
            policy=FailurePolicy(settings.SYNC_FAILURE_POLICY),
        )

    async def _sync_tree(
        self,
        db: AsyncSession,
        repository: TreeRepository[Any],
        desc_model: type[Any],
        name: str,
        items: Sequence[TreeSyncItem],
    ) -> SyncResult:
        target = await TreeSyncTarget(db, repository, desc_model, name).load()
        return await self._synchronizer(target).synchronize(items)

    async def sync_areas(self, db: AsyncSession, items: Sequence[TreeSyncItem]) -> SyncResult:
        """영역 트리를 동기화합니다 — Synchronize the area tree."""
        return await self._sync_tree(db, area_repository, AreaDesc, "areas", items)

    async def sync_categories(self, db: AsyncSession, items: Sequence[TreeSyncItem]) -> SyncResult:
        """카테고리 트리를 동기화합니다 — Synchronize the category tree."""
        return await self._sync_tree(db, category_repository, CategoryDesc, "categories", items)

    async def sync_atons(self, db: AsyncSession, items: Sequence[AtonSyncItem]) -> SyncResult:
        """항로표지를 동기화합니다 — Synchronize AtoNs."""
        return await self._synchronizer(AtonSyncTarget(db)).synchronize(items)

    async def sync_message_tags(self, db: AsyncSession, items: Sequence[MessageTagSyncItem]) -> SyncResult:
        """메시지 태그를 동기화합니다 — Synchronize message tags."""
        return await self._synchronizer(MessageTagSyncTarget(db)).synchronize(items)

    async def sync_transmitters(self, db: AsyncSession, items: Sequence[TransmitterSyncItem]) -> SyncResult:
        """NAVTEX 송신소를 동기화합니다 — Synchronize NAVTEX transmitters."""
        return await self._synchronizer(TransmitterSyncTarget(db)).synchronize(items)


# 싱글턴 인스턴스 — Singleton instance
sync_service: SyncService = SyncService()
