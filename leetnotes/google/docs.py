"""Append generated notes to the end of a Google Doc."""

from __future__ import annotations

from typing import Any

from leetnotes.errors import (
    ApiError,
    DocumentAppendError,
    DocumentPermissionError,
    LeetNotesError,
)
from leetnotes.google.client import ApiClient
from leetnotes.observability.logging import get_logger
from leetnotes.observability.telemetry import counter, log_event

logger = get_logger(__name__)

NOTES_SEPARATOR = "\n\n---\n\n"


def compute_insertion_index(document: dict[str, Any]) -> int:
    """
    Index just before the document's trailing newline

    Every Docs body ends with a newline that text can't be inserted after,
    so the last segment's endIndex - 1 is the last valid position. Empty
    bodies and endIndex <= 1 give index 1 (start of body).
    """
    content = (document.get("body") or {}).get("content") or []
    end_index = ((content[-1] or {}).get("endIndex") or 1) if content else 1
    return end_index - 1 if end_index > 1 else 1


def format_notes_insert(notes: str) -> str:
    return f"{NOTES_SEPARATOR}{notes}\n"


def _is_permission_denied(error: LeetNotesError) -> bool:
    if isinstance(error, ApiError) and (error.status == 403 or error.reason == "PERMISSION_DENIED"):
        return True
    return "PERMISSION_DENIED" in str(error)


class DocumentAppender:
    """Writes notes into a Google Doc with a single batchUpdate insertText."""

    def __init__(self, docs: ApiClient):
        self.docs = docs

    def append(self, doc_id: str, notes: str) -> None:
        """
        Append `notes` after a separator at the end of the document

        There's no revision check: a concurrent edit between the read and the
        write can shift the end of the document.

        Raises:
            DocumentPermissionError: If the doc is missing or not writable
            DocumentAppendError: On any other failure
        """
        try:
            document = self.docs.get(f"documents/{doc_id}", params={"fields": "body(content)"})
            index = compute_insertion_index(document)

            requests_body = {
                "requests": [
                    {
                        "insertText": {
                            "location": {"index": index},
                            "text": format_notes_insert(notes),
                        }
                    }
                ]
            }
            self.docs.post(f"documents/{doc_id}:batchUpdate", requests_body)

        except LeetNotesError as e:
            counter("docs.append.error")
            if _is_permission_denied(e):
                raise DocumentPermissionError(
                    f'Permission denied for Google Doc ID "{doc_id}". '
                    "Please ensure the Doc exists and you have edit access."
                ) from e
            raise DocumentAppendError(
                f'Failed to append notes to Google Doc "{doc_id}": {e}'
            ) from e

        counter("docs.append.success")
        log_event("docs.appended", doc_id=doc_id, index=index, chars=len(notes))
