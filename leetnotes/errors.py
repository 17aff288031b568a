"""Exception taxonomy for the note pipeline.

Every failure is raised where it happens with a user-facing message and
propagates untouched to the caller that reports it (the note handler, an
HTTP route or the CLI). Nothing here is retried.
"""

from __future__ import annotations


class LeetNotesError(Exception):
    """Base class for all pipeline errors. str(exc) is shown to the user."""


class AuthenticationError(LeetNotesError):
    """Raised when an OAuth token cannot be obtained for a Google service."""


class ApiError(LeetNotesError):
    """Raised when a Google API answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        reason: str | None = None,
        detail: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.reason = reason
        # server-supplied error.message (or "HTTP error <status>") without our prefix
        self.detail = detail or message


class ContentError(LeetNotesError):
    """Raised when Gemini returns no usable text (empty or safety-blocked)."""


class DocumentResolutionError(LeetNotesError):
    """Raised when the default notes document can't be found or created."""


class DocumentAppendError(LeetNotesError):
    """Raised when notes can't be appended to the target document."""


class DocumentPermissionError(DocumentAppendError):
    """Raised when the target document rejects the write (PERMISSION_DENIED)."""


class ValidationError(LeetNotesError):
    """Raised when a request or settings payload is missing required fields."""


class ConfigurationError(LeetNotesError):
    """Raised when required configuration (the Gemini API key) is missing."""


class ExtractionError(LeetNotesError):
    """Raised when a submission can't be extracted from a problem page."""


class CredentialEncryptionError(LeetNotesError):
    """Raised when stored secrets can't be encrypted or decrypted."""
