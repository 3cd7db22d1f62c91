"""Google OAuth web flow using Authlib.

This module provides the authorization-code flow used by the web service:
- Consent URL creation with a per-login ``state`` value
- Code exchange and profile lookup, producing ``UserCredentials``
- Stateless Google API service creation from a bare access token

Nothing here caches tokens or API handles between calls; every request
builds its own session and service objects.
"""

import logging
from typing import Any

import requests
from authlib.integrations.requests_client import OAuth2Session
from authlib.oauth2 import OAuth2Error
from google.oauth2.credentials import Credentials as GoogleCredentials
from googleapiclient.discovery import build

from sheet_relay.google.credentials import UserCredentials
from sheet_relay.google.exceptions import GoogleAuthError, TokenError

logger = logging.getLogger(__name__)


# Common Google OAuth scopes
SCOPES = {
    "profile": "https://www.googleapis.com/auth/userinfo.profile",
    "email": "https://www.googleapis.com/auth/userinfo.email",
    "drive": "https://www.googleapis.com/auth/drive",
    "drive_readonly": "https://www.googleapis.com/auth/drive.readonly",
    "drive_file": "https://www.googleapis.com/auth/drive.file",
    "sheets": "https://www.googleapis.com/auth/spreadsheets",
    "sheets_readonly": "https://www.googleapis.com/auth/spreadsheets.readonly",
}

# Profile, email, file-store write and spreadsheet read/write
DEFAULT_SCOPES = ["profile", "email", "drive_file", "sheets"]


def resolve_scopes(scopes: list[str]) -> list[str]:
    """Resolve scope names to full URLs."""
    resolved = []
    for scope in scopes:
        if scope.startswith("https://"):
            resolved.append(scope)
        elif scope in SCOPES:
            resolved.append(SCOPES[scope])
        else:
            raise ValueError(
                f"Unknown scope: {scope}. Use full URL or one of: {list(SCOPES.keys())}"
            )
    return resolved


def build_credentials(access_token: str) -> GoogleCredentials:
    """Wrap a bare access token in a Google Credentials object."""
    return GoogleCredentials(token=access_token)


def build_service(service_name: str, version: str, access_token: str):
    """Build a fresh Google API service for a single access token.

    Args:
        service_name: Name of the service (e.g., 'drive', 'sheets').
        version: API version (e.g., 'v3').
        access_token: Bearer token for the calling user or service.

    Returns:
        Google API service object.
    """
    return build(
        service_name,
        version,
        credentials=build_credentials(access_token),
        cache_discovery=False,
    )


class GoogleOAuth:
    """Google OAuth authorization-code flow for a web client.

    Example:
        >>> auth = GoogleOAuth(client_id, client_secret, redirect_uri)
        >>> url, state = auth.get_authorization_url()
        >>> # ... user consents, Google redirects back with ?code=...&state=...
        >>> credentials = auth.exchange_code(code)
    """

    AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        redirect_uri: str,
        scopes: list[str] | None = None,
    ):
        """Initialize Google OAuth.

        Args:
            client_id: OAuth web client ID.
            client_secret: OAuth web client secret.
            redirect_uri: Callback URL registered for the client.
            scopes: List of scope names or full URLs. Defaults to DEFAULT_SCOPES.

        Raises:
            GoogleAuthError: If the client ID or secret is missing.
        """
        if not client_id or not client_secret:
            raise GoogleAuthError(
                "Google OAuth is not configured. "
                "Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET."
            )

        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.required_scopes = resolve_scopes(scopes or DEFAULT_SCOPES)

    def _session(self) -> OAuth2Session:
        return OAuth2Session(
            client_id=self.client_id,
            client_secret=self.client_secret,
            scope=" ".join(self.required_scopes),
            redirect_uri=self.redirect_uri,
            token_endpoint_auth_method="client_secret_post",
        )

    def get_authorization_url(self) -> tuple[str, str]:
        """Start OAuth authorization flow.

        Returns:
            Tuple of (authorization URL, state). The caller must keep the state
            and compare it on callback.
        """
        session = self._session()
        authorization_url, state = session.create_authorization_url(
            self.AUTHORIZE_URL,
            access_type="offline",
            include_granted_scopes="true",
        )
        return authorization_url, state

    def fetch_token(self, code: str) -> dict[str, Any]:
        """Exchange an authorization code for a token dict."""
        session = self._session()
        try:
            return session.fetch_token(
                self.TOKEN_URL,
                code=code,
                grant_type="authorization_code",
            )
        except (OAuth2Error, requests.RequestException) as e:
            raise TokenError(f"Failed to exchange authorization code: {e}") from e

    def fetch_profile(self, access_token: str) -> dict[str, Any]:
        """Read the OpenID profile for an access token."""
        try:
            response = requests.get(
                self.USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise TokenError(f"Failed to fetch user profile: {e}") from e

    def exchange_code(self, code: str) -> UserCredentials:
        """Complete the authorization flow.

        Args:
            code: Authorization code from the OAuth callback.

        Returns:
            Credentials for the newly authenticated user.

        Raises:
            TokenError: If the exchange or profile lookup fails.
        """
        token = self.fetch_token(code)
        access_token = token.get("access_token")
        if not access_token:
            raise TokenError("Token response did not include an access token")

        profile = self.fetch_profile(access_token)
        logger.info(f"Authenticated Google user {profile.get('sub')}")

        return UserCredentials(
            subject_id=str(profile.get("sub", "")),
            display_name=profile.get("name") or "",
            email=profile.get("email") or None,
            access_token=access_token,
            refresh_token=token.get("refresh_token"),
        )
