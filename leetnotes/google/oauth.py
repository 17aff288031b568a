"""Google OAuth2 sign-in for Drive and Docs access

Plays the role of the browser's interactive identity prompt:
- Interactive desktop sign-in (local server redirect) on first use
- Stored credentials reused on later requests
- Expired tokens refreshed automatically
- Sign-out deletes stored credentials and revokes the token

Tokens are stored encrypted via UserCredentialsRepository.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import requests
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from leetnotes.config import GOOGLE_OAUTH_CLIENT_SECRETS, HTTP_TIMEOUT_SECONDS
from leetnotes.errors import AuthenticationError
from leetnotes.observability.logging import get_logger
from leetnotes.observability.telemetry import counter, log_event
from leetnotes.storage.user_credentials_repository import UserCredentialsRepository

logger = get_logger(__name__)

# drive.file is enough to list and create the notes document this app owns;
# documents is needed to read and edit a user-supplied document.
GOOGLE_SCOPES = [
    "https://www.googleapis.com/auth/drive.file",
    "https://www.googleapis.com/auth/documents",
]

DEFAULT_USER_ID = "default"
REVOKE_URL = "https://oauth2.googleapis.com/revoke"


class GoogleOAuthService:
    """
    Service that hands out Google access tokens for the Drive and Docs clients

    get_access_token() is the token provider passed to BearerTokenAuth.
    """

    def __init__(
        self,
        credentials_repo: UserCredentialsRepository | None = None,
        user_id: str = DEFAULT_USER_ID,
        client_secrets_file: str | None = None,
    ):
        """
        Initialize OAuth service

        Args:
            credentials_repo: Repository for credential storage (auto-created if None)
            user_id: Whose credentials to use ("default" for the local single-user setup)
            client_secrets_file: OAuth client config path (GOOGLE_OAUTH_CLIENT_SECRETS if None)
        """
        self.credentials_repo = credentials_repo or UserCredentialsRepository()
        self.user_id = user_id
        self.client_secrets_file = client_secrets_file or GOOGLE_OAUTH_CLIENT_SECRETS

    def sign_in(self) -> Credentials:
        """
        Run the interactive desktop OAuth flow and store the result

        Opens the user's browser and waits on a local redirect server.

        Raises:
            FileNotFoundError: If client secrets file not found
            AuthenticationError: If the browser sign-in fails or is cancelled
        """
        try:
            flow = InstalledAppFlow.from_client_secrets_file(
                self.client_secrets_file,
                scopes=GOOGLE_SCOPES,
            )
        except FileNotFoundError as e:
            logger.error("Client secrets file not found: %s", self.client_secrets_file)
            raise FileNotFoundError(
                f"Google OAuth client secrets not found at {self.client_secrets_file}. "
                f"Download them from Google Cloud Console and place them at this path. "
                f"Set GOOGLE_OAUTH_CLIENT_SECRETS to override the location."
            ) from e

        try:
            credentials = flow.run_local_server(port=0)
        except Exception as e:
            logger.error("Interactive sign-in failed for user %s: %s", self.user_id, e)
            raise AuthenticationError(f"Google sign-in failed: {e}") from e

        self._store(credentials)

        counter("oauth.sign_in.count")
        log_event("oauth.signed_in", user_id=self.user_id)
        return credentials

    def get_credentials(self, auto_refresh: bool = True) -> Credentials | None:
        """
        Load stored credentials, refreshing them if they are about to expire

        Returns:
            Google OAuth2 Credentials object or None if the user never signed in

        Raises:
            ValueError: If a refresh was needed and failed
        """
        creds_data = self.credentials_repo.get_by_user_id(self.user_id)

        if not creds_data:
            logger.warning("No credentials found for user: %s", self.user_id)
            return None

        token_dict = creds_data["token_dict"]
        credentials = Credentials(
            token=token_dict.get("token"),
            refresh_token=token_dict.get("refresh_token"),
            token_uri=token_dict.get("token_uri"),
            client_id=token_dict.get("client_id"),
            client_secret=token_dict.get("client_secret"),
            scopes=creds_data["scopes"],
        )

        if auto_refresh and self.credentials_repo.is_token_expired(self.user_id):
            logger.info("Token expired or expiring soon, refreshing for user: %s", self.user_id)
            credentials = self.refresh(credentials)

        return credentials

    def refresh(self, credentials: Credentials) -> Credentials:
        """
        Refresh expired credentials and store the new token

        Raises:
            ValueError: If there's no refresh token or the refresh call fails
        """
        if not credentials.refresh_token:
            raise ValueError(f"No refresh token available for user: {self.user_id}")

        try:
            credentials.refresh(Request())
        except Exception as e:
            logger.error("Failed to refresh credentials for user %s: %s", self.user_id, e)
            raise ValueError(f"Token refresh failed: {e}") from e

        self._store(credentials)
        counter("oauth.token_refreshed.count")
        return credentials

    def get_access_token(self, interactive: bool = True) -> str:
        """
        Return a bearer token for the Drive/Docs APIs

        Args:
            interactive: Run the browser sign-in when nothing is stored

        Returns:
            Access token string ("" if Google returned none; callers treat that as a failure)

        Raises:
            ValueError: If not signed in and interactive is False, or refresh fails
        """
        credentials = self.get_credentials()

        if credentials is None:
            if not interactive:
                raise ValueError("No token received. Run `leetnotes auth login` to sign in.")
            credentials = self.sign_in()

        return credentials.token or ""

    def revoke(self) -> None:
        """
        Revoke and delete stored credentials (sign-out)

        Revocation failures are logged; stored credentials are deleted regardless.
        """
        try:
            credentials = self.get_credentials(auto_refresh=False)
            if credentials and credentials.token:
                response = requests.post(
                    REVOKE_URL,
                    params={"token": credentials.token},
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                    timeout=HTTP_TIMEOUT_SECONDS,
                )
                response.raise_for_status()
                logger.info("Revoked OAuth token for user: %s", self.user_id)
        except Exception as e:
            logger.warning("Failed to revoke token (may already be invalid): %s", e)

        self.credentials_repo.delete_credentials(self.user_id)
        log_event("oauth.signed_out", user_id=self.user_id)

    def _store(self, credentials: Credentials) -> None:
        token_dict = {
            "token": credentials.token,
            "refresh_token": credentials.refresh_token,
            "token_uri": credentials.token_uri,
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
        }

        # google-auth keeps expiry as naive UTC
        if credentials.expiry:
            expiry = credentials.expiry
            if expiry.tzinfo is None:
                expiry = expiry.replace(tzinfo=UTC)
        else:
            expiry = datetime.now(UTC) + timedelta(hours=1)

        self.credentials_repo.store_credentials(
            user_id=self.user_id,
            token_dict=token_dict,
            scopes=list(credentials.scopes or GOOGLE_SCOPES),
            token_expiry=expiry,
        )
