"""Authenticated REST client for Google APIs

One client shape for the three services LeetNotes talks to:
- Drive v3 (find/create the notes document) - OAuth bearer token
- Docs v1 (read/append document content) - OAuth bearer token
- Gemini generateContent - static x-goog-api-key header

Each call is a single attempt: no retry, no backoff.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

import requests

from leetnotes.config import (
    DOCS_API_BASE_URL,
    DRIVE_API_BASE_URL,
    GEMINI_API_BASE_URL,
    HTTP_TIMEOUT_SECONDS,
)
from leetnotes.errors import ApiError, AuthenticationError
from leetnotes.observability.logging import get_logger
from leetnotes.observability.telemetry import counter, log_event, time_block

logger = get_logger(__name__)

TokenProvider = Callable[[], str]


class AuthStrategy(Protocol):
    """Adds credentials to outgoing request headers."""

    def apply(self, headers: dict[str, str]) -> dict[str, str]: ...


class BearerTokenAuth:
    """
    OAuth bearer token auth

    The token provider is called on every request; it may prompt the user
    to sign in (see GoogleOAuthService.get_access_token).
    """

    def __init__(self, token_provider: TokenProvider, service_name: str):
        self.token_provider = token_provider
        self.service_name = service_name

    def apply(self, headers: dict[str, str]) -> dict[str, str]:
        """
        Raises:
            AuthenticationError: If the provider fails or returns an empty token
        """
        try:
            token = self.token_provider()
        except Exception as e:
            counter("auth.token.error")
            raise AuthenticationError(f"{self.service_name} Authentication failed: {e}") from e

        if not token:
            counter("auth.token.empty")
            raise AuthenticationError(
                f"{self.service_name} Authentication failed: No token received. "
                "User may need to sign in."
            )

        return {**headers, "Authorization": f"Bearer {token}"}


class ApiKeyHeaderAuth:
    """Static API key sent in a header (Gemini uses x-goog-api-key)."""

    def __init__(self, api_key: str, header: str = "x-goog-api-key"):
        self.api_key = api_key
        self.header = header

    def apply(self, headers: dict[str, str]) -> dict[str, str]:
        return {**headers, self.header: self.api_key}


class ApiClient:
    """
    JSON-over-HTTPS client parameterized by base URL and auth strategy

    Non-2xx responses raise ApiError carrying the status code, the server's
    error.message (or "HTTP error <status>") and error.status as `reason`.
    """

    def __init__(
        self,
        base_url: str,
        auth: AuthStrategy,
        service_name: str,
        session: requests.Session | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url
        self.auth = auth
        self.service_name = service_name
        self.session = session or requests.Session()
        self.timeout = timeout

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Issue one authenticated request and return the parsed JSON body

        Args:
            endpoint: Path relative to base_url (e.g. "files" or "documents/<id>:batchUpdate")
            method: HTTP method
            headers: Extra headers (auth headers win on conflict)
            json_body: JSON request body
            params: Query string parameters

        Raises:
            AuthenticationError: If credentials can't be obtained
            ApiError: On non-2xx status or transport failure
        """
        url = f"{self.base_url}{endpoint}"
        request_headers = self.auth.apply(dict(headers or {}))
        if json_body is not None:
            request_headers.setdefault("Content-Type", "application/json")

        metric = f"api.{self.service_name.lower().replace(' ', '_')}"
        try:
            with time_block(metric):
                response = self.session.request(
                    method,
                    url,
                    headers=request_headers,
                    json=json_body,
                    params=params,
                    timeout=self.timeout,
                )
        except requests.exceptions.RequestException as e:
            counter(f"{metric}.transport_error")
            logger.error("%s request to %s failed: %s", self.service_name, endpoint, e)
            raise ApiError(f"{self.service_name} API request failed: {e}", detail=str(e)) from e

        body = _parse_json(response)

        if not response.ok:
            error = body.get("error") if isinstance(body.get("error"), dict) else {}
            detail = error.get("message") or f"HTTP error {response.status_code}"
            reason = error.get("status")
            message = f"{self.service_name} API request failed ({response.status_code}): {detail}"
            if reason:
                message = f"{message} [{reason}]"

            counter(f"{metric}.error")
            log_event(
                "api.request_failed",
                service=self.service_name,
                status=response.status_code,
                reason=reason,
            )
            raise ApiError(message, status=response.status_code, reason=reason, detail=detail)

        counter(f"{metric}.success")
        return body

    def get(self, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        return self.request(endpoint, method="GET", **kwargs)

    def post(self, endpoint: str, json_body: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        return self.request(endpoint, method="POST", json_body=json_body, **kwargs)


def _parse_json(response: requests.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def drive_client(token_provider: TokenProvider, **kwargs: Any) -> ApiClient:
    return ApiClient(
        DRIVE_API_BASE_URL, BearerTokenAuth(token_provider, "Google Drive"), "Google Drive", **kwargs
    )


def docs_client(token_provider: TokenProvider, **kwargs: Any) -> ApiClient:
    return ApiClient(
        DOCS_API_BASE_URL, BearerTokenAuth(token_provider, "Google Docs"), "Google Docs", **kwargs
    )


def gemini_client(api_key: str, **kwargs: Any) -> ApiClient:
    return ApiClient(GEMINI_API_BASE_URL, ApiKeyHeaderAuth(api_key), "Gemini", **kwargs)
