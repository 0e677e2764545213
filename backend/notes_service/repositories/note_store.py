"""
Notes Service — Note Store
==========================

What:  Persistence operations for the `notes` table.
How:   Thin wrapper over an AsyncSession; every mutation is flushed so ids and
       timestamps are assigned before the service serializes the row. The
       request-scoped session (database.get_db_session) commits.
Who:   Used only by NoteService.

Contract:
    insert(title, content) -> Note
    find(note_id)          -> Note | None
    list()                 -> [Note] newest first
    update(note, fields)   -> Note
    delete(note)           -> None
"""

from datetime import timedelta
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from notes_service.models.note import Note, utcnow
from notes_service.schemas.note import as_utc

_MUTABLE_FIELDS = ("title", "content")


class NoteStore:
    """Note persistence bound to one database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, title: str, content: str) -> Note:
        # One clock reading for both columns keeps created_at == updated_at
        now = utcnow()
        note = Note(title=title, content=content, created_at=now, updated_at=now)
        self.db.add(note)
        await self.db.flush()
        return note

    async def find(self, note_id: int) -> Optional[Note]:
        result = await self.db.execute(select(Note).where(Note.id == note_id))
        return result.scalar_one_or_none()

    async def list(self) -> List[Note]:
        # id breaks ties between notes created within the same clock tick
        result = await self.db.execute(
            select(Note).order_by(desc(Note.created_at), desc(Note.id))
        )
        return list(result.scalars().all())

    async def update(self, note: Note, fields: dict) -> Note:
        for name in _MUTABLE_FIELDS:
            if name in fields:
                setattr(note, name, fields[name])

        # updated_at must move forward even if the clock has not ticked
        now = utcnow()
        previous = as_utc(note.updated_at)
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        note.updated_at = now

        await self.db.flush()
        return note

    async def delete(self, note: Note) -> None:
        await self.db.delete(note)
        await self.db.flush()
