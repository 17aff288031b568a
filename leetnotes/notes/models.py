"""Pydantic models for the generate-notes message contract.

The extension (or CLI) sends a NoteRequest and gets a NoteResponse back.
Fields default to empty strings so a payload with missing fields reaches
the handler, which reports it as a failed response instead of a 422.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

GENERATE_NOTES_MESSAGE = "generate-notes"


class ExtractedSubmission(BaseModel):
    """Code, title and language read from a solved-problem page."""

    code: str
    title: str
    language: str = "unknown"


class NoteRequest(BaseModel):
    """Payload of a generate-notes message."""

    model_config = ConfigDict(populate_by_name=True)

    code: str = ""
    title: str = ""
    language: str = ""
    doc_id: str | None = Field(default=None, alias="docId")

    @field_validator("code", "title", "language", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_submission(
        cls, submission: ExtractedSubmission, doc_id: str | None = None
    ) -> NoteRequest:
        return cls(
            code=submission.code,
            title=submission.title,
            language=submission.language,
            doc_id=doc_id,
        )

    def is_complete(self) -> bool:
        return bool(self.code and self.title and self.language)


class NoteResponse(BaseModel):
    """Result reported back to the caller."""

    success: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> NoteResponse:
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> NoteResponse:
        return cls(success=False, error=error)
