"""Extract a submission (code, title, language) from a problem page's HTML.

Mirrors what the extension's in-page script reads:
- code: the first <pre><code> element, its child nodes' text joined
- title: the document title up to the first " - "
- language: the `language-<name>` class on the code element ("unknown" if absent)

Page markup is site-specific; anything that can produce an
ExtractedSubmission can stand in for this module.
"""

from __future__ import annotations

import requests
from bs4 import BeautifulSoup, Tag

from leetnotes.config import HTTP_TIMEOUT_SECONDS
from leetnotes.errors import ExtractionError
from leetnotes.notes.models import ExtractedSubmission
from leetnotes.observability.logging import get_logger

logger = get_logger(__name__)

LANGUAGE_CLASS_PREFIX = "language-"
TITLE_SEPARATOR = " - "

NO_CODE_BLOCK_MESSAGE = "No code block found on this page."
INCOMPLETE_MESSAGE = "Failed to extract code, title, or language from the page."


def _language_from_classes(classes: list[str]) -> str:
    for css_class in classes:
        if css_class.startswith(LANGUAGE_CLASS_PREFIX):
            return css_class[len(LANGUAGE_CLASS_PREFIX) :] or "unknown"
    return "unknown"


def extract_submission(html: str) -> ExtractedSubmission:
    """
    Parse page HTML into an ExtractedSubmission

    Raises:
        ExtractionError: If there's no <pre><code> element, or code/title/language is empty
    """
    soup = BeautifulSoup(html or "", "html.parser")

    code_el = soup.select_one("pre > code")
    if code_el is None:
        raise ExtractionError(NO_CODE_BLOCK_MESSAGE)

    code = "".join(
        child.get_text() if isinstance(child, Tag) else str(child) for child in code_el.children
    )

    page_title = soup.title.get_text(" ", strip=True) if soup.title else ""
    title = page_title.split(TITLE_SEPARATOR)[0].strip()

    language = _language_from_classes(code_el.get("class") or [])

    if not code or not title or not language:
        raise ExtractionError(INCOMPLETE_MESSAGE)

    logger.info("Extracted %s submission for %r (%d chars)", language, title, len(code))
    return ExtractedSubmission(code=code, title=title, language=language)


def fetch_page(url: str, session: requests.Session | None = None) -> str:
    """
    Download a page's HTML

    Raises:
        ExtractionError: On network failure or non-2xx status
    """
    http = session or requests.Session()
    try:
        response = http.get(url, timeout=HTTP_TIMEOUT_SECONDS)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.error("Failed to fetch %s: %s", url, e)
        raise ExtractionError(f"Could not load page {url}: {e}") from e
    return response.text


def extract_submission_from_file(path: str) -> ExtractedSubmission:
    """Read a saved HTML page and extract the submission."""
    try:
        with open(path, encoding="utf-8") as f:
            html = f.read()
    except OSError as e:
        raise ExtractionError(f"Could not read page file {path}: {e}") from e
    return extract_submission(html)


def extract_submission_from_url(url: str) -> ExtractedSubmission:
    return extract_submission(fetch_page(url))
