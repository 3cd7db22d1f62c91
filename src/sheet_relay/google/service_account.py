"""Google Service Account authentication.

The webhook endpoints are called by automation tools rather than a logged-in
user, so they read spreadsheets with a service-level token instead. The
spreadsheet must be shared with the service account email.

Example:
    >>> auth = GoogleServiceAccount(
    ...     key_path="service_account_key.json",
    ...     scopes=["sheets_readonly"]
    ... )
    >>> token = auth.get_access_token()
"""

import json
import logging
from pathlib import Path

from google.auth.exceptions import GoogleAuthError as GoogleLibraryAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from sheet_relay.google.exceptions import (
    CredentialsNotFoundError,
    GoogleAuthError,
    TokenError,
)
from sheet_relay.google.oauth import resolve_scopes

logger = logging.getLogger(__name__)


class GoogleServiceAccount:
    """Google Service Account authentication.

    Uses a service account key file for server-to-server authentication.
    No user interaction required.
    """

    def __init__(
        self,
        key_path: str | Path = "service_account_key.json",
        scopes: list[str] | None = None,
    ):
        """Initialize service account authentication.

        Args:
            key_path: Path to service account JSON key file.
            scopes: List of scope names (e.g., ["sheets_readonly"]) or full URLs.
                   If None, defaults to ["sheets_readonly"].

        Raises:
            CredentialsNotFoundError: If key file not found.
            GoogleAuthError: If key file is invalid.
        """
        self.key_path = Path(key_path)

        if not self.key_path.exists():
            raise CredentialsNotFoundError(str(self.key_path))

        self.scopes = resolve_scopes(scopes or ["sheets_readonly"])

        # Load and validate the key file
        try:
            with open(self.key_path) as f:
                key_data = json.load(f)

            if key_data.get("type") != "service_account":
                raise GoogleAuthError(
                    f"Invalid key file: expected type 'service_account', "
                    f"got '{key_data.get('type')}'"
                )

            self.client_email = key_data.get("client_email", "")

        except json.JSONDecodeError as e:
            raise GoogleAuthError(f"Invalid JSON in key file: {e}") from e

        self._credentials = service_account.Credentials.from_service_account_info(
            key_data,
            scopes=self.scopes,
        )

        logger.info(f"Service account initialized: {self.client_email}")

    def get_access_token(self) -> str:
        """Exchange the signed assertion for a fresh access token.

        Raises:
            TokenError: If the token endpoint rejects the assertion.
        """
        try:
            self._credentials.refresh(Request())
        except GoogleLibraryAuthError as e:
            raise TokenError(f"Failed to obtain service account token: {e}") from e
        return self._credentials.token
