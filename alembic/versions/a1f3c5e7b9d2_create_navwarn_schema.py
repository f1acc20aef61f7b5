"""create_navwarn_schema

Revision ID: a1f3c5e7b9d2
Revises:
Create Date: 2026-10-19 09:00:00.000000

영역/카테고리 트리, 항로표지, 메시지 태그, NAVTEX 송신소 테이블 생성.
Create area/category trees, AtoNs, message tags and NAVTEX transmitters.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = 'a1f3c5e7b9d2'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _tree_tables(table: str, desc_table: str, fk: str) -> None:
    # 트리 노드 — parent_id + 물질화 경로 lineage (Tree nodes: parent_id + materialized lineage)
    op.create_table(
        table,
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('mrn', sa.String(255), nullable=False),
        sa.Column('parent_id', UUID(as_uuid=True), sa.ForeignKey(f'{table}.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('lineage', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), server_default='1', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(f'ix_{table}_mrn', table, ['mrn'], unique=True)
    op.create_index(f'ix_{table}_parent_id', table, ['parent_id'])
    # LIKE 'prefix%' 검색용 — text_pattern_ops for prefix scans
    op.create_index(f'ix_{table}_lineage', table, ['lineage'], postgresql_ops={'lineage': 'text_pattern_ops'})

    # 언어별 이름 — Localized names (one per language)
    op.create_table(
        desc_table,
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column(fk, UUID(as_uuid=True), sa.ForeignKey(f'{table}.id', ondelete='CASCADE'), nullable=False),
        sa.Column('lang', sa.String(8), nullable=False),
        sa.Column('name', sa.String(500), nullable=False),
        sa.UniqueConstraint(fk, 'lang', name=f'uq_{desc_table[:-6]}_desc_lang'),
    )


def upgrade() -> None:
    _tree_tables('areas', 'area_descs', 'area_id')
    _tree_tables('categories', 'category_descs', 'category_id')

    # aton_nodes — 항로표지 (AtoNs keyed by aton_uid)
    op.create_table(
        'aton_nodes',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('aton_uid', sa.String(255), nullable=False),
        sa.Column('lat', sa.Float(), nullable=False),
        sa.Column('lon', sa.Float(), nullable=False),
        sa.Column('version', sa.Integer(), server_default='1', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_aton_nodes_aton_uid', 'aton_nodes', ['aton_uid'], unique=True)

    op.create_table(
        'aton_tags',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('aton_id', UUID(as_uuid=True), sa.ForeignKey('aton_nodes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('k', sa.String(255), nullable=False),
        sa.Column('v', sa.String(1000), nullable=False),
        sa.UniqueConstraint('aton_id', 'k', name='uq_aton_tag_key'),
    )
    op.create_index('ix_aton_tags_k', 'aton_tags', ['k'])

    # message_tags — 메시지 태그 (Message tags, temp tags carry expiry_date)
    op.create_table(
        'message_tags',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('tag_id', sa.String(128), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('tag_type', sa.String(20), server_default='private', nullable=False),
        sa.Column('expiry_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version', sa.Integer(), server_default='1', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_message_tags_tag_id', 'message_tags', ['tag_id'], unique=True)
    op.create_index('ix_message_tags_expiry_date', 'message_tags', ['expiry_date'])

    op.create_table(
        'message_tag_messages',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('tag_id', UUID(as_uuid=True), sa.ForeignKey('message_tags.id', ondelete='CASCADE'), nullable=False),
        sa.Column('message_uid', sa.String(128), nullable=False),
        sa.UniqueConstraint('tag_id', 'message_uid', name='uq_message_tag_message'),
    )
    op.create_index('ix_message_tag_messages_message_uid', 'message_tag_messages', ['message_uid'])

    # navtex_transmitters — NAVTEX 송신소 및 담당 영역 (Transmitters and covered areas)
    op.create_table(
        'navtex_transmitters',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('version', sa.Integer(), server_default='1', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_navtex_transmitters_name', 'navtex_transmitters', ['name'], unique=True)

    op.create_table(
        'navtex_transmitter_areas',
        sa.Column('transmitter_id', UUID(as_uuid=True), sa.ForeignKey('navtex_transmitters.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('area_id', UUID(as_uuid=True), sa.ForeignKey('areas.id', ondelete='CASCADE'), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table('navtex_transmitter_areas')
    op.drop_table('navtex_transmitters')
    op.drop_table('message_tag_messages')
    op.drop_table('message_tags')
    op.drop_table('aton_tags')
    op.drop_table('aton_nodes')
    op.drop_table('category_descs')
    op.drop_table('categories')
    op.drop_table('area_descs')
    op.drop_table('areas')
