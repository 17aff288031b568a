"""Locate or create the notes document in Google Drive."""

from __future__ import annotations

from leetnotes.config import DEFAULT_DOC_NAME
from leetnotes.errors import DocumentResolutionError, LeetNotesError
from leetnotes.google.client import ApiClient
from leetnotes.observability.logging import get_logger
from leetnotes.observability.telemetry import counter, log_event

logger = get_logger(__name__)

GOOGLE_DOC_MIME_TYPE = "application/vnd.google-apps.document"


def _quote(value: str) -> str:
    """Escape a value for a single-quoted Drive query string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def build_search_query(name: str) -> str:
    return (
        f"name = '{_quote(name)}' and mimeType = '{GOOGLE_DOC_MIME_TYPE}' and trashed = false"
    )


class DocumentResolver:
    """
    Resolve the Google Doc that receives notes

    Resolution is not cached; every request lists Drive again.
    """

    def __init__(self, drive: ApiClient):
        self.drive = drive

    def resolve(self, preferred_id: str | None = None) -> str:
        """
        Return preferred_id if given, otherwise find or create the default doc

        Args:
            preferred_id: User-supplied document ID (blank means "use the default doc")
        """
        if preferred_id and preferred_id.strip():
            return preferred_id.strip()
        return self.get_or_create()

    def get_or_create(self, name: str = DEFAULT_DOC_NAME) -> str:
        """
        Find a non-trashed Google Doc called `name`, creating one if none exists

        When several match, the first in Drive's listing order wins.

        Raises:
            DocumentResolutionError: If listing or creation fails, or create returns no ID
        """
        logger.info("Looking up notes document %r", name)

        try:
            result = self.drive.get(
                "files",
                params={
                    "q": build_search_query(name),
                    "fields": "files(id,name)",
                    "spaces": "drive",
                },
            )

            files = result.get("files") or []
            if files:
                doc_id = (files[0] or {}).get("id")
                if not doc_id:
                    raise DocumentResolutionError("Drive listing returned a document with no ID.")
                counter("drive.doc_found")
                logger.info("Using existing notes document %s", doc_id)
                return doc_id

            created = self.drive.post("files", {"name": name, "mimeType": GOOGLE_DOC_MIME_TYPE})
            doc_id = created.get("id") if created else None
            if not doc_id:
                raise DocumentResolutionError(
                    "Failed to create default document: No ID received from Drive API."
                )

        except LeetNotesError as e:
            raise DocumentResolutionError(
                f"Failed to get or create default Google Doc: {e}"
            ) from e

        counter("drive.doc_created")
        log_event("drive.doc_created", doc_id=doc_id, name=name)
        return doc_id
