"""Badges, claim codes and badge instances

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 10:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'badges',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('shortname', sa.String(length=128), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('criteria_content', sa.Text(), nullable=True),
        sa.Column('criteria_url', sa.String(length=512), nullable=True),
        sa.Column('program', sa.String(length=64), nullable=True),
        sa.Column('do_not_list', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('image', sa.LargeBinary(), nullable=False),
        sa.Column('category_award', sa.String(length=128), nullable=True),
        sa.Column('category_requirement', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('category_weight', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('categories', sa.JSON(), nullable=False),
        sa.Column('time_to_earn', sa.String(length=16), nullable=True),
        sa.Column('age_ranges', sa.JSON(), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=True),
        sa.Column('activity_type', sa.String(length=16), nullable=True),
        sa.Column('prerequisites', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('name', name='uq_badges_name'),
    )
    op.create_index('ix_badges_shortname', 'badges', ['shortname'], unique=True)
    op.create_index('ix_badges_program', 'badges', ['program'])
    op.create_index('ix_badges_category_award', 'badges', ['category_award'])

    op.create_table(
        'badge_behaviors',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('badge_id', sa.String(length=32), sa.ForeignKey('badges.id', ondelete='CASCADE'), nullable=False),
        sa.Column('shortname', sa.String(length=64), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False),
        sa.UniqueConstraint('badge_id', 'shortname', name='uq_badge_behaviors_badge_shortname'),
    )
    op.create_index('ix_badge_behaviors_badge_id', 'badge_behaviors', ['badge_id'])

    # The unique index on code is the global claim-code namespace.
    op.create_table(
        'claim_codes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('badge_id', sa.String(length=32), sa.ForeignKey('badges.id', ondelete='CASCADE'), nullable=False),
        sa.Column('code', sa.String(length=255), nullable=False),
        sa.Column('claimed_by', sa.String(length=255), nullable=True),
        sa.Column('reserved_for', sa.String(length=255), nullable=True),
        sa.Column('multi', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_claim_codes_code', 'claim_codes', ['code'], unique=True)
    op.create_index('ix_claim_codes_badge_id', 'claim_codes', ['badge_id'])

    op.create_table(
        'badge_instances',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user', sa.String(length=255), nullable=False),
        sa.Column('badge_id', sa.String(length=32), sa.ForeignKey('badges.id', ondelete='CASCADE'), nullable=False),
        sa.Column('assertion', sa.Text(), nullable=False),
        sa.Column('hash', sa.String(length=64), nullable=False),
        sa.Column('issued_on', sa.DateTime(timezone=True), nullable=False),
        sa.Column('seen', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('user_badge_key', sa.String(length=300), nullable=False),
        sa.UniqueConstraint('user_badge_key', name='uq_badge_instances_user_badge_key'),
    )
    op.create_index('ix_badge_instances_user', 'badge_instances', ['user'])
    op.create_index('ix_badge_instances_badge_id', 'badge_instances', ['badge_id'])
    op.create_index('ix_badge_instances_hash', 'badge_instances', ['hash'])


def downgrade() -> None:
    op.drop_table('badge_instances')
    op.drop_table('claim_codes')
    op.drop_table('badge_behaviors')
    op.drop_table('badges')
