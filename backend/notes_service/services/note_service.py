"""
Notes Service — Note Service (Business Logic)
=============================================

What:  The five note operations: list, get, create, update, delete.
How:   Validates input with NotePayload, delegates persistence to NoteStore,
       returns NoteRead schemas. Signals failures with the exception
       hierarchy in notes_service.exceptions.
Who:   Called by route handlers in routes/notes.py.

Operation flow (PUT /api/notes/{id}):
    find(id) ──▶ None? ──▶ NotFoundError (404)
        │
        ▼
    validate body ──▶ invalid? ──▶ ValidationError (422), store untouched
        │
        ▼
    update row, refresh updated_at ──▶ NoteRead

NoteService is stateless: it receives the request's session for each call,
so one module-level instance serves every request.
"""

import logging
from typing import Any, Awaitable, Callable, List, TypeVar

import pydantic
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notes_service.exceptions import DatabaseError, NotFoundError, ValidationError
from notes_service.models.note import Note
from notes_service.repositories.note_store import NoteStore
from notes_service.schemas.note import NotePayload, NoteRead, collect_field_errors

logger = logging.getLogger(__name__)

T = TypeVar("T")


def validate_note_input(data: Any) -> NotePayload:
    """
    Validate a raw request body for create/update.

    Raises:
        ValidationError: with a field → messages map when title or content
            is missing, empty, not a string, or the title is too long.
    """
    if data is None:
        data = {}
    try:
        return NotePayload.model_validate(data)
    except pydantic.ValidationError as e:
        errors = collect_field_errors(e.errors())
        logger.info("Note input rejected: %s", sorted(errors))
        raise ValidationError(errors=errors)


class NoteService:
    """
    Business logic layer for note operations.

    Error Handling Strategy:
        NotFoundError and ValidationError are raised deliberately and pass
        through unchanged. SQLAlchemy failures are logged and wrapped in
        DatabaseError so driver details never reach the response.
    """

    async def _guard(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await call()
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Could not {operation}. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def _require(self, store: NoteStore, note_id: int) -> Note:
        note = await self._guard("retrieve the note", lambda: store.find(note_id))
        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        return note

    async def list_notes(self, db: AsyncSession) -> List[NoteRead]:
        """All notes, newest first. An empty table yields an empty list."""
        store = NoteStore(db)
        notes = await self._guard("list notes", store.list)
        return [NoteRead.model_validate(note) for note in notes]

    async def get_note(self, db: AsyncSession, note_id: int) -> NoteRead:
        """
        Retrieve a single note by ID.

        Raises:
            NotFoundError: Note with given ID does not exist (→ 404)
            DatabaseError: Query execution failed (→ 500)
        """
        note = await self._require(NoteStore(db), note_id)
        return NoteRead.model_validate(note)

    async def create_note(self, db: AsyncSession, data: Any) -> NoteRead:
        """
        Validate and insert a new note.

        Validation runs before the store is touched, so an invalid body never
        produces a row.
        """
        payload = validate_note_input(data)
        store = NoteStore(db)
        note = await self._guard(
            "create the note",
            lambda: store.insert(title=payload.title, content=payload.content),
        )
        logger.info("Note %s created", note.id)
        return NoteRead.model_validate(note)

    async def update_note(self, db: AsyncSession, note_id: int, data: Any) -> NoteRead:
        """
        Overwrite title and content of an existing note.

        The id is looked up first: a missing note is a 404 even when the body
        is also invalid.
        """
        store = NoteStore(db)
        note = await self._require(store, note_id)
        payload = validate_note_input(data)
        note = await self._guard(
            "update the note",
            lambda: store.update(note, payload.model_dump()),
        )
        logger.info("Note %s updated", note.id)
        return NoteRead.model_validate(note)

    async def delete_note(self, db: AsyncSession, note_id: int) -> None:
        """Permanently remove a note (no tombstone)."""
        store = NoteStore(db)
        note = await self._require(store, note_id)
        await self._guard("delete the note", lambda: store.delete(note))
        logger.info("Note %s deleted", note_id)


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
