"""
Gemini note generator.

Sends one single-turn generateContent request per submission through the
shared ApiClient (x-goog-api-key auth) and returns the first candidate's
text. Status codes and empty/blocked responses are mapped to messages the
user can act on.
"""

from __future__ import annotations

import json
from typing import Any

from leetnotes.config import GEMINI_MODEL
from leetnotes.errors import ApiError, ContentError
from leetnotes.google.client import ApiClient
from leetnotes.llm.prompts import get_notes_prompt
from leetnotes.observability.logging import get_logger
from leetnotes.observability.telemetry import counter, log_event

logger = get_logger(__name__)

GENERATE_FAILED_PREFIX = "Failed to generate notes via Gemini"


def build_notes_prompt(code: str, title: str, language: str) -> str:
    """Fill the notes template with the submission (title, language, fenced code)."""
    return get_notes_prompt(code=code, title=title, language=language)


def extract_text(response: dict[str, Any]) -> str | None:
    """First candidate's first text part, or None."""
    candidates = response.get("candidates") or []
    if not candidates:
        return None
    parts = ((candidates[0] or {}).get("content") or {}).get("parts") or []
    if not parts:
        return None
    return (parts[0] or {}).get("text")


def _map_api_error(error: ApiError) -> ApiError:
    detail = error.detail
    if error.status in (401, 403):
        message = (
            f"Gemini API Authentication/Permission Failed: {detail}. "
            "Check API key validity and API enablement."
        )
    elif error.status == 400:
        message = (
            f"Gemini API Bad Request (400): {detail}. "
            "Check the request format/prompt or if the prompt violates safety policies."
        )
    else:
        message = f"Gemini API request failed: {detail}"

    return ApiError(
        f"{GENERATE_FAILED_PREFIX}: {message}",
        status=error.status,
        reason=error.reason,
        detail=detail,
    )


class NoteGenerator:
    """Generates study notes for a prompt with a Gemini model."""

    def __init__(self, client: ApiClient, model: str = GEMINI_MODEL):
        self.client = client
        self.model = model

    def generate(self, prompt: str) -> str:
        """
        Submit `prompt` and return the generated notes, stripped

        Raises:
            ApiError: On HTTP failure (401/403, 400 and other statuses worded differently)
            ContentError: If the prompt was safety-blocked or nothing was generated
        """
        body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

        try:
            response = self.client.post(f"models/{self.model}:generateContent", body)
        except ApiError as e:
            counter("gemini.api_error")
            logger.error("Gemini API error (status=%s): %s", e.status, e.detail)
            raise _map_api_error(e) from e

        notes = extract_text(response)

        if not notes:
            feedback = response.get("promptFeedback") or {}
            block_reason = feedback.get("blockReason")
            if block_reason:
                counter("gemini.blocked")
                log_event("gemini.prompt_blocked", block_reason=block_reason)
                raise ContentError(
                    f"{GENERATE_FAILED_PREFIX}: Gemini API blocked the prompt due to safety "
                    f"reasons: {block_reason}. Safety ratings: "
                    f"{json.dumps(feedback.get('safetyRatings'))}"
                )

            counter("gemini.empty")
            logger.error("No text content found in Gemini response: %s", list(response))
            raise ContentError(
                f"{GENERATE_FAILED_PREFIX}: No notes content generated by Gemini, "
                "or the response format was unexpected."
            )

        counter("gemini.success")
        return notes.strip()
