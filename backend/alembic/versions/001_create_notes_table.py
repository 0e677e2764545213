"""Create notes table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `notes` table: integer id, title, content and the two
       UTC timestamps, plus the index backing the newest-first list query.

Rollback: downgrade() drops the table (all notes are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the notes table and its created_at index."""
    op.create_table(
        "notes",
        sa.Column(
            "id",
            sa.Integer(),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column(
            "title",
            sa.String(255),
            nullable=False,
            comment="Note title, at most 255 characters",
        ),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            comment="Note body, unbounded",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this note was created (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this note was last modified (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # GET /api/notes always orders by created_at DESC
    op.create_index(
        "idx_notes_created_at",
        "notes",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_notes_created_at", table_name="notes")
    op.drop_table("notes")
