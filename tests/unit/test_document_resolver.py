"""Unit tests for finding or creating the notes document"""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from leetnotes.errors import ApiError, DocumentResolutionError
from leetnotes.google.client import ApiClient
from leetnotes.google.drive import GOOGLE_DOC_MIME_TYPE, DocumentResolver, build_search_query


@pytest.fixture
def drive():
    return Mock(spec=ApiClient)


def test_existing_document_is_reused_without_create(drive):
    drive.get.return_value = {
        "files": [{"id": "doc-first", "name": "LeetNotes"}, {"id": "doc-second", "name": "LeetNotes"}]
    }

    doc_id = DocumentResolver(drive).get_or_create()

    assert doc_id == "doc-first"
    drive.post.assert_not_called()

    params = drive.get.call_args.kwargs["params"]
    assert params["q"] == (
        f"name = 'LeetNotes' and mimeType = '{GOOGLE_DOC_MIME_TYPE}' and trashed = false"
    )
    assert params["fields"] == "files(id,name)"
    assert params["spaces"] == "drive"


def test_missing_document_is_created_once(drive):
    drive.get.return_value = {"files": []}
    drive.post.return_value = {"id": "new-doc"}

    doc_id = DocumentResolver(drive).get_or_create()

    assert doc_id == "new-doc"
    drive.post.assert_called_once_with(
        "files", {"name": "LeetNotes", "mimeType": GOOGLE_DOC_MIME_TYPE}
    )


def test_listing_without_files_key_creates(drive):
    drive.get.return_value = {}
    drive.post.return_value = {"id": "new-doc"}

    assert DocumentResolver(drive).get_or_create() == "new-doc"
    assert drive.post.call_count == 1


def test_create_without_id_fails(drive):
    drive.get.return_value = {"files": []}
    drive.post.return_value = {"name": "LeetNotes"}

    with pytest.raises(DocumentResolutionError) as exc_info:
        DocumentResolver(drive).get_or_create()

    assert "No ID received from Drive API" in str(exc_info.value)


def test_api_failure_is_wrapped(drive):
    drive.get.side_effect = ApiError("Google Drive API request failed (500): boom", status=500)

    with pytest.raises(DocumentResolutionError) as exc_info:
        DocumentResolver(drive).get_or_create()

    assert str(exc_info.value).startswith("Failed to get or create default Google Doc:")
    assert "boom" in str(exc_info.value)


def test_preferred_id_skips_drive(drive):
    doc_id = DocumentResolver(drive).resolve("  user-doc-id  ")

    assert doc_id == "user-doc-id"
    drive.get.assert_not_called()
    drive.post.assert_not_called()


@pytest.mark.parametrize("preferred", [None, "", "   "])
def test_blank_preferred_id_falls_back_to_default_doc(drive, preferred):
    drive.get.return_value = {"files": [{"id": "default-doc"}]}

    assert DocumentResolver(drive).resolve(preferred) == "default-doc"


def test_search_query_escapes_quotes():
    assert "name = 'Bob\\'s Notes'" in build_search_query("Bob's Notes")


def test_listing_entry_without_id_is_a_resolution_error(drive):
    drive.get.return_value = {"files": [{"name": "LeetNotes"}]}

    with pytest.raises(DocumentResolutionError) as exc_info:
        DocumentResolver(drive).get_or_create()

    assert "Failed to get or create default Google Doc" in str(exc_info.value)
    drive.post.assert_not_called()
