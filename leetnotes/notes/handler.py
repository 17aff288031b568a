"""
Generate-notes request handler.

One request runs a fixed sequence with no back-edges:

    validate payload -> load settings -> resolve document -> build prompt
    -> generate notes -> append to document -> respond

Any failure jumps straight to the response with the error's message. Steps
already done are not undone (a freshly created document stays in Drive).
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError as PayloadValidationError
from starlette.concurrency import run_in_threadpool

from leetnotes.config import SINGLE_FLIGHT
from leetnotes.errors import ConfigurationError, LeetNotesError
from leetnotes.google.client import docs_client, drive_client, gemini_client
from leetnotes.google.docs import DocumentAppender
from leetnotes.google.drive import DocumentResolver
from leetnotes.google.oauth import GoogleOAuthService
from leetnotes.llm.gemini import NoteGenerator, build_notes_prompt
from leetnotes.notes.models import (
    GENERATE_NOTES_MESSAGE,
    NoteRequest,
    NoteResponse,
)
from leetnotes.observability.logging import get_logger
from leetnotes.observability.telemetry import counter, log_event, time_block
from leetnotes.storage.settings_repository import SettingsRepository

logger = get_logger(__name__)

INVALID_PAYLOAD_MESSAGE = "Invalid payload: Missing code, title, or language."
MISSING_API_KEY_MESSAGE = "Gemini API Key is not set. Please set it in the extension settings."
IN_FLIGHT_MESSAGE = "A note generation request is already in progress."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


def _default_oauth() -> GoogleOAuthService:
    return GoogleOAuthService()


def default_resolver_factory() -> DocumentResolver:
    return DocumentResolver(drive_client(_default_oauth().get_access_token))


def default_appender_factory() -> DocumentAppender:
    return DocumentAppender(docs_client(_default_oauth().get_access_token))


def default_generator_factory(api_key: str) -> NoteGenerator:
    return NoteGenerator(gemini_client(api_key))


class NoteRequestHandler:
    """
    Runs the generate-notes pipeline for one request at a time

    Collaborators are built per request through factories so nothing
    (tokens, document IDs, API keys) is cached between requests.
    """

    def __init__(
        self,
        settings_repo: SettingsRepository | None = None,
        resolver_factory: Callable[[], DocumentResolver] = default_resolver_factory,
        generator_factory: Callable[[str], NoteGenerator] = default_generator_factory,
        appender_factory: Callable[[], DocumentAppender] = default_appender_factory,
        single_flight: bool = SINGLE_FLIGHT,
    ):
        self.settings_repo = settings_repo or SettingsRepository()
        self.resolver_factory = resolver_factory
        self.generator_factory = generator_factory
        self.appender_factory = appender_factory
        self.single_flight = single_flight
        self._in_flight = threading.Lock()

    def handle(self, request: NoteRequest) -> NoteResponse:
        """
        Run the pipeline and report the outcome; never raises

        Args:
            request: code, title, language and optional docId

        Returns:
            NoteResponse(success=True) or NoteResponse(success=False, error=<message>)
        """
        if not request.is_complete():
            counter("notes.invalid_payload")
            logger.error(
                "Invalid payload received: missing code, title, or language (title=%r)",
                request.title,
            )
            return NoteResponse.failed(INVALID_PAYLOAD_MESSAGE)

        if self.single_flight and not self._in_flight.acquire(blocking=False):
            counter("notes.rejected_in_flight")
            logger.warning("Rejected note request for %r: another one is running", request.title)
            return NoteResponse.failed(IN_FLIGHT_MESSAGE)

        try:
            with time_block("notes.pipeline"):
                doc_id = self._run(request)
        except LeetNotesError as e:
            counter("notes.failed")
            logger.error("Note generation failed for %r: %s", request.title, e)
            return NoteResponse.failed(str(e) or UNKNOWN_ERROR_MESSAGE)
        except Exception as e:
            counter("notes.failed")
            logger.exception("Unexpected error generating notes for %r", request.title)
            return NoteResponse.failed(str(e) or UNKNOWN_ERROR_MESSAGE)
        finally:
            if self.single_flight:
                self._in_flight.release()

        counter("notes.success")
        log_event("notes.saved", doc_id=doc_id, language=request.language)
        return NoteResponse.ok()

    def _run(self, request: NoteRequest) -> str:
        settings = self.settings_repo.load()
        if not settings.api_key:
            logger.warning("Gemini API Key not found in settings")
            raise ConfigurationError(MISSING_API_KEY_MESSAGE)

        preferred_doc_id = (request.doc_id or "").strip() or settings.doc_id.strip()
        doc_id = self.resolver_factory().resolve(preferred_doc_id)

        prompt = build_notes_prompt(request.code, request.title, request.language)
        notes = self.generator_factory(settings.api_key).generate(prompt)

        self.appender_factory().append(doc_id, notes)
        return doc_id

    async def handle_async(self, request: NoteRequest) -> NoteResponse:
        """Run handle() in a worker thread and await its result."""
        return await run_in_threadpool(self.handle, request)

    def handle_message(self, message: dict[str, Any]) -> dict[str, Any] | None:
        """
        Entry point for raw extension messages

        Returns:
            Response dict ({"success": ..., "error"?: ...}), or None when the
            message type isn't generate-notes
        """
        if message.get("type") != GENERATE_NOTES_MESSAGE:
            return None

        try:
            request = NoteRequest.model_validate(message.get("payload") or {})
        except PayloadValidationError:
            counter("notes.invalid_payload")
            return NoteResponse.failed(INVALID_PAYLOAD_MESSAGE).model_dump(exclude_none=True)

        return self.handle(request).model_dump(exclude_none=True)
