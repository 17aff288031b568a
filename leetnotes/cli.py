"""
LeetNotes command line

    leetnotes settings show
    leetnotes settings save --api-key KEY [--doc-id ID]
    leetnotes generate --file page.html | --url URL [--doc-id ID]
    leetnotes auth login | logout
    leetnotes serve [--host HOST] [--port PORT]

Results are printed as one-line toasts; exit status is 0 on success, 1 on failure.
"""

from __future__ import annotations

import argparse
import sys

from leetnotes.errors import ExtractionError, LeetNotesError, ValidationError
from leetnotes.extraction.page import extract_submission_from_file, extract_submission_from_url
from leetnotes.infrastructure.database import init_database
from leetnotes.notes.handler import NoteRequestHandler
from leetnotes.notes.models import NoteRequest
from leetnotes.observability.logging import get_logger
from leetnotes.storage.settings_repository import SettingsRepository
from leetnotes.utils.redaction import mask_secret

logger = get_logger(__name__)

MISSING_KEY_TOAST = "Please save your Gemini API key first"


def toast_success(message: str) -> None:
    print(f"✓ {message}")


def toast_error(message: str) -> None:
    print(f"✗ {message}", file=sys.stderr)


def cmd_settings_show(repo: SettingsRepository) -> int:
    settings = repo.load()
    print(f"Gemini API key: {mask_secret(settings.api_key) or '(not set)'}")
    print(f"Google Doc ID:  {settings.doc_id or '(default LeetNotes document)'}")
    return 0


def cmd_settings_save(repo: SettingsRepository, api_key: str, doc_id: str | None) -> int:
    try:
        repo.save(api_key, doc_id)
    except ValidationError as e:
        toast_error(str(e))
        return 1
    toast_success("Settings saved")
    return 0


def cmd_generate(
    repo: SettingsRepository,
    handler: NoteRequestHandler,
    file: str | None = None,
    url: str | None = None,
    doc_id: str | None = None,
) -> int:
    """
    Extract the submission from a page and run the note pipeline

    The key check here duplicates the handler's: the handler may be reached
    without this command (HTTP), and this command fails before any page fetch.
    """
    settings = repo.load()
    if not settings.api_key:
        toast_error(MISSING_KEY_TOAST)
        return 1

    try:
        if file:
            submission = extract_submission_from_file(file)
        else:
            submission = extract_submission_from_url(url)
    except ExtractionError as e:
        toast_error(str(e))
        return 1

    target_doc_id = doc_id if doc_id is not None else settings.doc_id
    response = handler.handle(NoteRequest.from_submission(submission, doc_id=target_doc_id))

    if response.success:
        toast_success("Notes saved to Google Docs")
        return 0

    toast_error(response.error or "Failed to generate or save notes.")
    return 1


def cmd_auth(action: str) -> int:
    from leetnotes.google.oauth import GoogleOAuthService

    try:
        oauth = GoogleOAuthService()
        if action == "login":
            oauth.sign_in()
            toast_success("Signed in to Google")
        else:
            oauth.revoke()
            toast_success("Signed out of Google")
    except (FileNotFoundError, ValueError, LeetNotesError) as e:
        toast_error(str(e))
        return 1
    return 0


def cmd_serve(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run("leetnotes.api.app:app", host=host, port=port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="leetnotes",
        description="Generate study notes for a solved coding problem and append them to Google Docs",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    settings_parser = subparsers.add_parser("settings", help="Show or save settings")
    settings_sub = settings_parser.add_subparsers(dest="action", required=True)
    settings_sub.add_parser("show", help="Show stored settings")
    save_parser = settings_sub.add_parser("save", help="Save Gemini API key and Google Doc ID")
    save_parser.add_argument("--api-key", required=True, help="Gemini API key")
    save_parser.add_argument(
        "--doc-id",
        default="",
        help="Google Doc ID (leave blank to use/create the default 'LeetNotes' document)",
    )

    generate_parser = subparsers.add_parser("generate", help="Generate notes for a problem page")
    source = generate_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", help="Saved HTML of the solved problem page")
    source.add_argument("--url", help="URL of the solved problem page")
    generate_parser.add_argument("--doc-id", help="Override the saved Google Doc ID")

    auth_parser = subparsers.add_parser("auth", help="Google sign-in")
    auth_parser.add_argument("action", choices=["login", "logout"])

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API for the extension")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        return cmd_serve(args.host, args.port)

    init_database()

    if args.command == "auth":
        return cmd_auth(args.action)

    repo = SettingsRepository()
    try:
        if args.command == "settings":
            if args.action == "show":
                return cmd_settings_show(repo)
            return cmd_settings_save(repo, args.api_key, args.doc_id)

        return cmd_generate(
            repo, NoteRequestHandler(settings_repo=repo), args.file, args.url, args.doc_id
        )
    except LeetNotesError as e:
        toast_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
