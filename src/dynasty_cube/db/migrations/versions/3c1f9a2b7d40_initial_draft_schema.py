"""Initial draft schema: teams, card pool, sessions, picks, queues

Learn: The pool allows several rows per card_id (duplicates), so the
card_id index is plain, not unique. Uniqueness lives on the pick side:
one pick per pool row, and one copy of a card per team.

Revision ID: 3c1f9a2b7d40
Revises:
Create Date: 2026-10-18 09:12:44.118402
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f9a2b7d40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'teams',
        sa.Column('id', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('emoji', sa.String(length=16), nullable=False),
        sa.Column('motto', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'card_pools',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('card_id', sa.String(length=64), nullable=False),
        sa.Column('card_name', sa.String(length=200), nullable=False),
        sa.Column('card_set', sa.String(length=20), nullable=True),
        sa.Column('card_type', sa.String(length=200), nullable=True),
        sa.Column('rarity', sa.String(length=20), nullable=True),
        sa.Column('colors', sa.JSON(), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('mana_cost', sa.String(length=100), nullable=True),
        sa.Column('cmc', sa.Float(), nullable=True),
        sa.Column('cubucks_cost', sa.Integer(), nullable=False),
        sa.Column('pool_name', sa.String(length=100), nullable=False),
        sa.Column('cubecobra_elo', sa.Integer(), nullable=True),
        sa.Column('rating_updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_card_pools_card_id', 'card_pools', ['card_id'])
    op.create_index('ix_card_pools_pool_name', 'card_pools', ['pool_name'])

    op.create_table(
        'draft_sessions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('total_rounds', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'team_draft_picks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('session_id', sa.Uuid(), nullable=True),
        sa.Column('team_id', sa.String(length=50), nullable=False),
        sa.Column('card_pool_id', sa.Uuid(), nullable=False),
        sa.Column('card_id', sa.String(length=64), nullable=False),
        sa.Column('card_name', sa.String(length=200), nullable=False),
        sa.Column('card_set', sa.String(length=20), nullable=True),
        sa.Column('card_type', sa.String(length=200), nullable=True),
        sa.Column('rarity', sa.String(length=20), nullable=True),
        sa.Column('colors', sa.JSON(), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('mana_cost', sa.String(length=100), nullable=True),
        sa.Column('cmc', sa.Float(), nullable=True),
        sa.Column('pick_number', sa.Integer(), nullable=False),
        sa.Column('cubecobra_elo', sa.Integer(), nullable=True),
        sa.Column('rating_updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('drafted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['session_id'], ['draft_sessions.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['card_pool_id'], ['card_pools.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('team_id', 'card_id', name='uq_team_draft_picks_team_card'),
        sa.UniqueConstraint('card_pool_id', name='uq_team_draft_picks_card_pool'),
    )
    op.create_index('ix_team_draft_picks_team_id', 'team_draft_picks', ['team_id'])
    op.create_index('ix_team_draft_picks_session_id', 'team_draft_picks', ['session_id'])

    op.create_table(
        'team_draft_queue',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('team_id', sa.String(length=50), nullable=False),
        sa.Column('card_pool_id', sa.Uuid(), nullable=False),
        sa.Column('card_id', sa.String(length=64), nullable=False),
        sa.Column('card_name', sa.String(length=200), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('pinned', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['card_pool_id'], ['card_pools.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('team_id', 'card_pool_id', name='uq_team_draft_queue_card'),
    )
    op.create_index('ix_team_draft_queue_card_id', 'team_draft_queue', ['card_id'])


def downgrade() -> None:
    op.drop_index('ix_team_draft_queue_card_id', table_name='team_draft_queue')
    op.drop_table('team_draft_queue')
    op.drop_index('ix_team_draft_picks_session_id', table_name='team_draft_picks')
    op.drop_index('ix_team_draft_picks_team_id', table_name='team_draft_picks')
    op.drop_table('team_draft_picks')
    op.drop_table('draft_sessions')
    op.drop_index('ix_card_pools_pool_name', table_name='card_pools')
    op.drop_index('ix_card_pools_card_id', table_name='card_pools')
    op.drop_table('card_pools')
    op.drop_table('teams')
