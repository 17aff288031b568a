"""Unit tests for the generate-notes request handler

Tests cover:
- Payload validation before any storage or network access
- Missing API key
- Document selection (payload, stored, default)
- End-to-end happy path through real clients with a fake HTTP session
- Failure short-circuit and the single-in-flight guard
"""

from __future__ import annotations

import asyncio
import threading
from unittest.mock import Mock

import pytest
from http_fixtures import make_response, make_session

from leetnotes.errors import ContentError, DocumentPermissionError
from leetnotes.google.client import docs_client, drive_client, gemini_client
from leetnotes.google.docs import DocumentAppender
from leetnotes.google.drive import DocumentResolver
from leetnotes.llm.gemini import NoteGenerator
from leetnotes.notes.handler import (
    IN_FLIGHT_MESSAGE,
    INVALID_PAYLOAD_MESSAGE,
    MISSING_API_KEY_MESSAGE,
    NoteRequestHandler,
)
from leetnotes.notes.models import NoteRequest
from leetnotes.observability.telemetry import get_counter, get_latency_stats
from leetnotes.storage.settings_repository import SettingsRepository


@pytest.fixture
def settings_repo():
    repo = SettingsRepository()
    repo.save("gemini-key", "")
    return repo


@pytest.fixture
def collaborators():
    resolver = Mock(spec=DocumentResolver)
    resolver.resolve.return_value = "doc-1"
    generator = Mock(spec=NoteGenerator)
    generator.generate.return_value = "Generated notes"
    appender = Mock(spec=DocumentAppender)
    return resolver, generator, appender


def make_handler(repo, collaborators, **kwargs) -> NoteRequestHandler:
    resolver, generator, appender = collaborators
    return NoteRequestHandler(
        settings_repo=repo,
        resolver_factory=lambda: resolver,
        generator_factory=lambda api_key: generator,
        appender_factory=lambda: appender,
        **kwargs,
    )


VALID = {"code": "print(1)", "title": "Two Sum", "language": "python"}


@pytest.mark.parametrize("missing", ["code", "title", "language"])
def test_incomplete_payload_fails_without_side_effects(missing):
    repo = Mock(spec=SettingsRepository)
    resolver_factory = Mock()
    generator_factory = Mock()
    appender_factory = Mock()
    handler = NoteRequestHandler(
        settings_repo=repo,
        resolver_factory=resolver_factory,
        generator_factory=generator_factory,
        appender_factory=appender_factory,
    )
    payload = {**VALID, missing: ""}

    response = handler.handle(NoteRequest(**payload))

    assert response.success is False
    assert response.error == INVALID_PAYLOAD_MESSAGE
    repo.load.assert_not_called()
    resolver_factory.assert_not_called()
    generator_factory.assert_not_called()
    appender_factory.assert_not_called()


def test_missing_api_key_is_a_hard_stop(collaborators):
    repo = SettingsRepository()
    resolver, generator, appender = collaborators
    handler = make_handler(repo, collaborators)

    response = handler.handle(NoteRequest(**VALID))

    assert response.success is False
    assert response.error == MISSING_API_KEY_MESSAGE
    resolver.resolve.assert_not_called()
    generator.generate.assert_not_called()


def test_success_runs_pipeline_in_order(settings_repo, collaborators):
    resolver, generator, appender = collaborators
    handler = make_handler(settings_repo, collaborators)

    response = handler.handle(NoteRequest(**VALID, docId="  my-doc "))

    assert response.success is True
    assert response.error is None
    resolver.resolve.assert_called_once_with("my-doc")
    prompt = generator.generate.call_args.args[0]
    assert "Two Sum" in prompt and "print(1)" in prompt
    appender.append.assert_called_once_with("doc-1", "Generated notes")
    assert get_counter("notes.success") == 1
    assert get_latency_stats("notes.pipeline")["count"] == 1


def test_stored_doc_id_used_when_payload_blank(collaborators):
    repo = SettingsRepository()
    repo.save("gemini-key", "stored-doc")
    resolver, _, _ = collaborators

    make_handler(repo, collaborators).handle(NoteRequest(**VALID, docId=""))

    resolver.resolve.assert_called_once_with("stored-doc")


def test_generator_receives_stored_key(settings_repo, collaborators):
    resolver, generator, appender = collaborators
    seen_keys = []

    def generator_factory(api_key):
        seen_keys.append(api_key)
        return generator

    handler = NoteRequestHandler(
        settings_repo=settings_repo,
        resolver_factory=lambda: resolver,
        generator_factory=generator_factory,
        appender_factory=lambda: appender,
    )
    handler.handle(NoteRequest(**VALID))

    assert seen_keys == ["gemini-key"]


def test_generation_failure_short_circuits(settings_repo, collaborators):
    _, generator, appender = collaborators
    generator.generate.side_effect = ContentError("Failed to generate notes via Gemini: blocked")

    response = make_handler(settings_repo, collaborators).handle(NoteRequest(**VALID))

    assert response.success is False
    assert response.error == "Failed to generate notes via Gemini: blocked"
    assert get_counter("notes.failed") == 1
    appender.append.assert_not_called()


def test_append_failure_is_reported(settings_repo, collaborators):
    _, _, appender = collaborators
    appender.append.side_effect = DocumentPermissionError('Permission denied for Google Doc ID "x".')

    response = make_handler(settings_repo, collaborators).handle(NoteRequest(**VALID))

    assert response.success is False
    assert "Permission denied" in response.error


def test_unexpected_error_is_reported(settings_repo, collaborators):
    resolver, _, _ = collaborators
    resolver.resolve.side_effect = KeyError("id")

    response = make_handler(settings_repo, collaborators).handle(NoteRequest(**VALID))

    assert response.success is False
    assert response.error


def test_end_to_end_with_fake_google_apis(settings_repo):
    drive_session = make_session(
        make_response(200, {"files": []}),
        make_response(200, {"id": "created-doc"}),
    )
    gemini_session = make_session(
        make_response(
            200, {"candidates": [{"content": {"parts": [{"text": "  Notes for Two Sum \n"}]}}]}
        )
    )
    docs_session = make_session(
        make_response(200, {"body": {"content": [{"endIndex": 1}, {"endIndex": 20}]}}),
        make_response(200, {"replies": [{}]}),
    )

    handler = NoteRequestHandler(
        settings_repo=settings_repo,
        resolver_factory=lambda: DocumentResolver(drive_client(lambda: "tok", session=drive_session)),
        generator_factory=lambda key: NoteGenerator(gemini_client(key, session=gemini_session)),
        appender_factory=lambda: DocumentAppender(docs_client(lambda: "tok", session=docs_session)),
    )

    response = handler.handle_message(
        {
            "type": "generate-notes",
            "payload": {"code": "print(1)", "title": "Two Sum", "language": "python", "docId": ""},
        }
    )

    assert response == {"success": True}
    assert drive_session.request.call_count == 2

    gemini_headers = gemini_session.request.call_args.kwargs["headers"]
    assert gemini_headers["x-goog-api-key"] == "gemini-key"

    args, kwargs = docs_session.request.call_args
    assert args == ("POST", "https://docs.googleapis.com/v1/documents/created-doc:batchUpdate")
    insert = kwargs["json"]["requests"][0]["insertText"]
    assert insert == {"location": {"index": 19}, "text": "\n\n---\n\nNotes for Two Sum\n"}


def test_handle_message_ignores_other_types(settings_repo, collaborators):
    handler = make_handler(settings_repo, collaborators)

    assert handler.handle_message({"type": "ping"}) is None


def test_handle_message_rejects_malformed_payload(settings_repo, collaborators):
    handler = make_handler(settings_repo, collaborators)

    response = handler.handle_message({"type": "generate-notes", "payload": {"code": ["x"]}})

    assert response == {"success": False, "error": INVALID_PAYLOAD_MESSAGE}


def test_handle_async_returns_response(settings_repo, collaborators):
    handler = make_handler(settings_repo, collaborators)

    response = asyncio.run(handler.handle_async(NoteRequest(**VALID)))

    assert response.success is True


def test_overlapping_request_is_rejected(settings_repo, collaborators):
    resolver, generator, _ = collaborators
    started = threading.Event()
    release = threading.Event()

    def slow_generate(prompt):
        started.set()
        release.wait(timeout=5)
        return "notes"

    generator.generate.side_effect = slow_generate
    handler = make_handler(settings_repo, collaborators, single_flight=True)

    results = []
    worker = threading.Thread(target=lambda: results.append(handler.handle(NoteRequest(**VALID))))
    worker.start()
    assert started.wait(timeout=5)

    second = handler.handle(NoteRequest(**VALID))
    release.set()
    worker.join(timeout=5)

    assert second.success is False
    assert second.error == IN_FLIGHT_MESSAGE
    assert results[0].success is True

    # guard is released once the first request finishes
    assert handler.handle(NoteRequest(**VALID)).success is True


def test_overlap_allowed_when_guard_disabled(settings_repo, collaborators):
    handler = make_handler(settings_repo, collaborators, single_flight=False)
    handler._in_flight.acquire()
    try:
        assert handler.handle(NoteRequest(**VALID)).success is True
    finally:
        handler._in_flight.release()


def test_handle_message_null_fields_are_missing(settings_repo, collaborators):
    _, generator, _ = collaborators
    handler = make_handler(settings_repo, collaborators)

    response = handler.handle_message(
        {"type": "generate-notes", "payload": {**VALID, "code": None, "docId": None}}
    )

    assert response == {"success": False, "error": INVALID_PAYLOAD_MESSAGE}
    generator.generate.assert_not_called()
