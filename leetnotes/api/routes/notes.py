"""
Notes endpoint - the generate-notes message over HTTP.

The extension posts {code, title, language, docId} and always gets HTTP 200
with {success, error?}; the outcome lives in the body, as in the
extension's runtime message contract.
"""

from __future__ import annotations

from fastapi import APIRouter

from leetnotes.notes.handler import NoteRequestHandler
from leetnotes.notes.models import NoteRequest, NoteResponse
from leetnotes.observability.logging import get_logger

router = APIRouter(prefix="/api/notes", tags=["notes"])
logger = get_logger(__name__)

_note_handler: NoteRequestHandler | None = None


def set_note_handler(handler: NoteRequestHandler | None) -> None:
    """Inject the handler (app startup and tests)."""
    global _note_handler
    _note_handler = handler


def get_note_handler() -> NoteRequestHandler:
    global _note_handler
    if _note_handler is None:
        _note_handler = NoteRequestHandler()
    return _note_handler


@router.post("", response_model=NoteResponse, response_model_exclude_none=True)
async def generate_notes(request: NoteRequest) -> NoteResponse:
    """Generate notes for a submission and append them to the notes document."""
    logger.info("Received note request for %r (%s)", request.title, request.language)
    return await get_note_handler().handle_async(request)
