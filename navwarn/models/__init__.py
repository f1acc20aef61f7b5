"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    area: 영역 트리 및 언어별 이름 (Area tree and localized names)
    category: 카테고리 트리 및 언어별 이름 (Category tree and localized names)
    aton: 항로표지 노드 및 태그 (AtoN nodes and tags)
    message_tag: 메시지 태그 및 메시지 UID (Message tags and message UIDs)
    transmitter: NAVTEX 송신소 및 담당 영역 (NAVTEX transmitters and their areas)
"""

from navwarn.models.area import Area, AreaDesc
from navwarn.models.category import Category, CategoryDesc
from navwarn.models.aton import AtonNode, AtonTag
from navwarn.models.message_tag import MessageTag, MessageTagMessage
from navwarn.models.transmitter import NavtexTransmitter, navtex_transmitter_areas

__all__ = [
    "Area", "AreaDesc",
    "Category", "CategoryDesc",
    "AtonNode", "AtonTag",
    "MessageTag", "MessageTagMessage",
    "NavtexTransmitter", "navtex_transmitter_areas",
]
