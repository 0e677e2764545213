"""
Notes Service — Notes Route Handlers
====================================

What:  The five /api/notes endpoints.
How:   Extracts path and body, delegates to NoteService, wraps the result in
       the envelope. Failures propagate to the error normalizer.

Route Inventory:
    GET    /api/notes        → 200 {success, data: [Note]}
    POST   /api/notes        → 201 {success, message, data: Note}       | 422
    GET    /api/notes/{id}   → 200 {success, data: Note}                | 404
    PUT    /api/notes/{id}   → 200 {success, message, data: Note}       | 404, 422
    DELETE /api/notes/{id}   → 200 {success, message}                   | 404
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Path, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from notes_service.database import get_db_session
from notes_service.responses import envelope
from notes_service.schemas.note import Envelope
from notes_service.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])

_NOT_FOUND = {404: {"description": "Note not found", "model": Envelope}}
_INVALID = {422: {"description": "Validation failed", "model": Envelope}}

# Raw JSON body; NoteService owns validation so it runs before any store call
_BODY_EXAMPLE = {"title": "My Note", "content": "Note content"}

# notes.id is a 32-bit INTEGER; ids outside 1..NOTE_ID_MAX cannot exist
NOTE_ID_MAX = 2**31 - 1


@router.get(
    "/notes",
    response_model=Envelope,
    summary="List all notes, newest first",
)
async def list_notes(db: AsyncSession = Depends(get_db_session)) -> JSONResponse:
    notes = await note_service.list_notes(db)
    return envelope(success=True, data=notes)


@router.post(
    "/notes",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope,
    responses=_INVALID,
    summary="Create a note",
)
async def create_note(
    payload: Optional[Any] = Body(default=None, examples=[_BODY_EXAMPLE]),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    note = await note_service.create_note(db, payload)
    return envelope(
        success=True,
        status_code=status.HTTP_201_CREATED,
        message="Note created successfully",
        data=note,
    )


@router.get(
    "/notes/{note_id}",
    response_model=Envelope,
    responses=_NOT_FOUND,
    summary="Get a note by ID",
)
async def get_note(
    note_id: int = Path(ge=1, le=NOTE_ID_MAX),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    note = await note_service.get_note(db, note_id)
    return envelope(success=True, data=note)


@router.put(
    "/notes/{note_id}",
    response_model=Envelope,
    responses={**_NOT_FOUND, **_INVALID},
    summary="Update a note",
)
async def update_note(
    note_id: int = Path(ge=1, le=NOTE_ID_MAX),
    payload: Optional[Any] = Body(default=None, examples=[_BODY_EXAMPLE]),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    note = await note_service.update_note(db, note_id, payload)
    return envelope(success=True, message="Note updated successfully", data=note)


@router.delete(
    "/notes/{note_id}",
    response_model=Envelope,
    responses=_NOT_FOUND,
    summary="Delete a note",
)
async def delete_note(
    note_id: int = Path(ge=1, le=NOTE_ID_MAX),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    await note_service.delete_note(db, note_id)
    return envelope(success=True, message="Note deleted successfully")
