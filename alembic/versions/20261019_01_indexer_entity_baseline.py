"""Indexer entity store baseline

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "indexer_entity",
        sa.Column("entity_kind", sa.Text(), nullable=False),
        sa.Column("entity_id", sa.Text(), nullable=False),
        sa.Column("payload", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("entity_kind", "entity_id", name="pk_indexer_entity"),
    )
    op.create_index("ix_indexer_entity_kind", "indexer_entity", ["entity_kind"])


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("ix_indexer_entity_kind", table_name="indexer_entity")
    op.drop_table("indexer_entity")
