"""
Notes Service Client — View State
=================================

What:  Client-held state for a notes UI: the note collection, in-flight
       flags, the most recent error and a transient success message.
How:   NotesState is immutable; `reduce(state, action)` computes the next
       state. NotesStore owns the current state and notifies subscribers.
       NotesController turns user commands into API calls and dispatches
       the resulting actions.

Nothing here is persisted. A fresh store starts empty with `loading=True`
until the first fetch completes.

Flags:
    loading   → fetch in flight
    creating  → create in flight
    updating  → update in flight
    deleting  → delete in flight
The three mutation flags are independent of each other.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from notes_service.client.api import NotesApiClient
from notes_service.client.errors import ClientError
from notes_service.config import ClientSettings, client_settings

logger = logging.getLogger(__name__)

CREATED_MESSAGE = "Note created successfully!"
UPDATED_MESSAGE = "Note updated successfully!"
DELETED_MESSAGE = "Note deleted successfully!"
LOAD_FAILED_MESSAGE = "Failed to load notes. Please try again."
CREATE_FAILED_MESSAGE = "Failed to create note."
UPDATE_FAILED_MESSAGE = "Failed to update note."
DELETE_FAILED_MESSAGE = "Failed to delete note."

NoteData = Dict[str, Any]


@dataclass(frozen=True)
class NotesState:
    notes: Tuple[NoteData, ...] = ()
    loading: bool = True
    creating: bool = False
    updating: bool = False
    deleting: bool = False
    error: Optional[str] = None
    success_message: Optional[str] = None


# ── Actions ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Started:
    """A request began; `flag` is one of loading/creating/updating/deleting."""

    flag: str


@dataclass(frozen=True)
class Failed:
    flag: str
    error: str


@dataclass(frozen=True)
class Finished:
    """A request ended without changing the collection."""

    flag: str


@dataclass(frozen=True)
class NotesLoaded:
    notes: Tuple[NoteData, ...]


@dataclass(frozen=True)
class NoteCreated:
    note: NoteData


@dataclass(frozen=True)
class NoteUpdated:
    note: NoteData


@dataclass(frozen=True)
class NoteDeleted:
    note_id: int


@dataclass(frozen=True)
class SuccessShown:
    message: str


@dataclass(frozen=True)
class SuccessCleared:
    pass


@dataclass(frozen=True)
class ErrorCleared:
    pass


Action = Union[
    Started,
    Failed,
    Finished,
    NotesLoaded,
    NoteCreated,
    NoteUpdated,
    NoteDeleted,
    SuccessShown,
    SuccessCleared,
    ErrorCleared,
]

FLAGS = ("loading", "creating", "updating", "deleting")


def reduce(state: NotesState, action: Action) -> NotesState:
    """Pure transition function. Unknown actions leave the state unchanged."""
    if isinstance(action, Started):
        if action.flag not in FLAGS:
            raise ValueError(f"Unknown in-flight flag: {action.flag}")
        changes: Dict[str, Any] = {action.flag: True, "error": None}
        if action.flag != "loading":
            changes["success_message"] = None
        return replace(state, **changes)

    if isinstance(action, Failed):
        return replace(state, **{action.flag: False, "error": action.error})

    if isinstance(action, Finished):
        return replace(state, **{action.flag: False})

    if isinstance(action, NotesLoaded):
        return replace(state, notes=tuple(action.notes), loading=False)

    if isinstance(action, NoteCreated):
        return replace(state, notes=(action.note,) + state.notes, creating=False)

    if isinstance(action, NoteUpdated):
        note_id = action.note.get("id")
        notes = tuple(action.note if n.get("id") == note_id else n for n in state.notes)
        return replace(state, notes=notes, updating=False)

    if isinstance(action, NoteDeleted):
        notes = tuple(n for n in state.notes if n.get("id") != action.note_id)
        return replace(state, notes=notes, deleting=False)

    if isinstance(action, SuccessShown):
        return replace(state, success_message=action.message)

    if isinstance(action, SuccessCleared):
        return replace(state, success_message=None)

    if isinstance(action, ErrorCleared):
        return replace(state, error=None)

    return state


Listener = Callable[[NotesState], None]


class NotesStore:
    """Holds the current NotesState and fans out every change to subscribers."""

    def __init__(self, initial: Optional[NotesState] = None):
        self._state = initial or NotesState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> NotesState:
        return self._state

    def dispatch(self, action: Action) -> NotesState:
        new_state = reduce(self._state, action)
        if new_state is not self._state:
            self._state = new_state
            for listener in list(self._listeners):
                listener(new_state)
        return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


@dataclass(frozen=True)
class ActionResult:
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None


class NotesController:
    """
    Issues note commands and records their outcome in a NotesStore.

    Commands never raise for API failures: the classified message is stored
    in `state.error` and returned in the ActionResult.

    Example:
        controller = NotesController(NotesApiClient())
        await controller.fetch_notes()
        result = await controller.create_note({"title": "Hi", "content": "There"})
        controller.state.success_message   # "Note created successfully!"
    """

    def __init__(
        self,
        api: NotesApiClient,
        store: Optional[NotesStore] = None,
        config: ClientSettings = client_settings,
    ):
        self.api = api
        self.store = store or NotesStore()
        self.success_flash_seconds = config.success_flash_seconds
        self._flash_handle: Optional[asyncio.TimerHandle] = None

    @property
    def state(self) -> NotesState:
        return self.store.state

    # ── Commands ──────────────────────────────────────────────────────────

    async def fetch_notes(self) -> ActionResult:
        self.store.dispatch(Started("loading"))
        try:
            envelope = await self.api.list_notes()
        except ClientError as exc:
            return self._fail("loading", "fetching notes", exc, LOAD_FAILED_MESSAGE)

        if not _succeeded(envelope):
            self.store.dispatch(Finished("loading"))
            return ActionResult(success=False)

        notes = tuple(envelope.get("data") or ())
        self.store.dispatch(NotesLoaded(notes))
        return ActionResult(success=True, data=list(notes))

    async def create_note(self, data: Dict[str, Any]) -> ActionResult:
        self.store.dispatch(Started("creating"))
        try:
            envelope = await self.api.create_note(data)
        except ClientError as exc:
            return self._fail("creating", "creating note", exc, CREATE_FAILED_MESSAGE)

        if not _succeeded(envelope):
            self.store.dispatch(Finished("creating"))
            return ActionResult(success=False)

        note = envelope.get("data")
        self.store.dispatch(NoteCreated(note))
        self.flash_success(CREATED_MESSAGE)
        return ActionResult(success=True, data=note)

    async def update_note(self, note_id: int, data: Dict[str, Any]) -> ActionResult:
        self.store.dispatch(Started("updating"))
        try:
            envelope = await self.api.update_note(note_id, data)
        except ClientError as exc:
            return self._fail("updating", "updating note", exc, UPDATE_FAILED_MESSAGE)

        if not _succeeded(envelope):
            self.store.dispatch(Finished("updating"))
            return ActionResult(success=False)

        note = envelope.get("data")
        self.store.dispatch(NoteUpdated(note))
        self.flash_success(UPDATED_MESSAGE)
        return ActionResult(success=True, data=note)

    async def delete_note(self, note_id: int) -> ActionResult:
        self.store.dispatch(Started("deleting"))
        try:
            envelope = await self.api.delete_note(note_id)
        except ClientError as exc:
            return self._fail("deleting", "deleting note", exc, DELETE_FAILED_MESSAGE)

        if not _succeeded(envelope):
            self.store.dispatch(Finished("deleting"))
            return ActionResult(success=False)

        self.store.dispatch(NoteDeleted(note_id))
        self.flash_success(DELETED_MESSAGE)
        return ActionResult(success=True)

    # ── Acknowledgements ──────────────────────────────────────────────────

    def flash_success(self, message: str) -> None:
        """Show `message` and clear it after success_flash_seconds; restarts the timer."""
        self._cancel_flash()
        self.store.dispatch(SuccessShown(message))
        loop = asyncio.get_running_loop()
        self._flash_handle = loop.call_later(self.success_flash_seconds, self.dismiss_success)

    def dismiss_success(self) -> None:
        self._cancel_flash()
        self.store.dispatch(SuccessCleared())

    def dismiss_error(self) -> None:
        self.store.dispatch(ErrorCleared())

    def close(self) -> None:
        """Cancel any pending timer. The API client is owned by the caller."""
        self._cancel_flash()

    # ── Internals ─────────────────────────────────────────────────────────

    def _cancel_flash(self) -> None:
        if self._flash_handle is not None:
            self._flash_handle.cancel()
            self._flash_handle = None

    def _fail(self, flag: str, operation: str, exc: ClientError, fallback: str) -> ActionResult:
        message = exc.message or fallback
        logger.error("Error %s: %s", operation, message)
        self.store.dispatch(Failed(flag, message))
        return ActionResult(success=False, error=message)


def _succeeded(envelope: Any) -> bool:
    return isinstance(envelope, dict) and bool(envelope.get("success"))
