"""add tags table

Revision ID: 8b52e0d6c913
Revises: 3f1c9a2b7d40
Create Date: 2026-09-21 16:40:03.517920

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8b52e0d6c913"
down_revision: str | Sequence[str] | None = "3f1c9a2b7d40"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create tags, unique per (note_id, tag)."""
    op.create_table(
        "tags",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("note_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("tag", sa.Text(), nullable=False),
        sa.Column(
            "model",
            sa.String(100),
            nullable=False,
            server_default="gemini-2.0-flash",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["note_id"], ["notes.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("note_id", "tag", name="tags_note_id_tag_unique"),
    )
    op.create_index("ix_tags_note_id", "tags", ["note_id"])
    op.create_index("ix_tags_user_id", "tags", ["user_id"])
    op.create_index("ix_tags_tag", "tags", ["tag"])


def downgrade() -> None:
    """Drop tags table."""
    op.drop_index("ix_tags_tag", table_name="tags")
    op.drop_index("ix_tags_user_id", table_name="tags")
    op.drop_index("ix_tags_note_id", table_name="tags")
    op.drop_table("tags")
