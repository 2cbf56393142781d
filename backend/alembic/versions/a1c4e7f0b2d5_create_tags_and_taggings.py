"""create_tags_and_taggings

Revision ID: a1c4e7f0b2d5
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c4e7f0b2d5'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create tags and taggings tables."""
    op.create_table(
        'tags',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.UniqueConstraint('name', name='uq_tags_name'),
    )

    op.create_table(
        'taggings',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'tag_id',
            sa.String(36),
            sa.ForeignKey('tags.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('taggable_type', sa.String(100), nullable=False),
        sa.Column('taggable_id', sa.String(36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            'tag_id', 'taggable_type', 'taggable_id', name='uq_taggings_tag_taggable'
        ),
    )

    op.create_index('ix_taggings_tag_id', 'taggings', ['tag_id'])
    op.create_index('ix_taggings_taggable', 'taggings', ['taggable_type', 'taggable_id'])
    op.create_index('ix_taggings_created_at', 'taggings', ['created_at'])


def downgrade() -> None:
    """Drop taggings and tags tables."""
    op.drop_index('ix_taggings_created_at', 'taggings')
    op.drop_index('ix_taggings_taggable', 'taggings')
    op.drop_index('ix_taggings_tag_id', 'taggings')
    op.drop_table('taggings')
    op.drop_table('tags')
