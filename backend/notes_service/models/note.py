"""
Notes Service — Note SQLAlchemy Model
=====================================

What:  ORM model representing the `notes` table.
Who:   Used by NoteStore for CRUD operations and by Alembic for schema management.

Table Design:
    - Integer surrogate key assigned by the database, never reused by the app
    - title: VARCHAR(255), content: TEXT, both NOT NULL
    - created_at / updated_at: timezone-aware UTC timestamps

    Index on created_at DESC backs the only list query (newest first).
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from notes_service.database import Base


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A single note.

    Lifecycle:
        1. Inserted by the create operation (created_at == updated_at)
        2. Title/content overwritten in place by update (updated_at refreshed)
        3. Removed permanently by delete (no tombstone)
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Note title, at most 255 characters",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Note body, unbounded",
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    # Stored in UTC; conversion to local time happens in the client
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this note was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this note was last modified (UTC)",
    )

    __table_args__ = (
        Index("idx_notes_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title='{self.title}', created_at='{self.created_at}')>"
