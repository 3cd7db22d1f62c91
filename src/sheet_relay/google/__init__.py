"""Google OAuth and API authentication utilities."""

from sheet_relay.google.credentials import (
    TokenStore,
    UserCredentials,
    credentials_from_session,
    end_session,
    lookup_session,
    start_session,
)
from sheet_relay.google.exceptions import (
    CredentialsNotFoundError,
    GoogleAuthError,
    TokenError,
)
from sheet_relay.google.oauth import GoogleOAuth, build_service
from sheet_relay.google.service_account import GoogleServiceAccount

__all__ = [
    "GoogleOAuth",
    "GoogleServiceAccount",
    "UserCredentials",
    "TokenStore",
    "start_session",
    "end_session",
    "lookup_session",
    "credentials_from_session",
    "build_service",
    "GoogleAuthError",
    "CredentialsNotFoundError",
    "TokenError",
]
