"""Per-session user credentials.

The browser cookie only carries an opaque session id and the public
profile. Access and refresh tokens stay in a per-process ``TokenStore``
keyed by that id.
"""

from __future__ import annotations

import secrets
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sheet_relay.exceptions import TokenMissingError, UnauthenticatedError

SESSION_KEY = "user"


@dataclass(frozen=True)
class UserCredentials:
    """Google identity and tokens for one authenticated session."""

    subject_id: str
    display_name: str
    access_token: str | None
    email: str | None = None
    refresh_token: str | None = None

    @property
    def identity(self) -> str:
        """Email when known, display name otherwise."""
        return self.email or self.display_name

    def public_profile(self) -> dict[str, Any]:
        """Profile fields safe to return to the browser."""
        return {
            "id": self.subject_id,
            "displayName": self.display_name,
            "email": self.email,
        }


class TokenStore:
    """In-memory map of session ids to credentials.

    Entries live as long as the process; a restart logs every user out.
    """

    def __init__(self):
        self._entries: dict[str, UserCredentials] = {}
        self._lock = threading.Lock()

    def save(self, credentials: UserCredentials) -> str:
        """Store credentials under a new random session id."""
        session_id = secrets.token_urlsafe(32)
        with self._lock:
            self._entries[session_id] = credentials
        return session_id

    def get(self, session_id: str | None) -> UserCredentials | None:
        if not session_id:
            return None
        with self._lock:
            return self._entries.get(session_id)

    def discard(self, session_id: str | None) -> None:
        if not session_id:
            return
        with self._lock:
            self._entries.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def start_session(
    session: dict[str, Any], store: TokenStore, credentials: UserCredentials
) -> str:
    """Keep the tokens server-side and put only the id and profile in the session."""
    session_id = store.save(credentials)
    session[SESSION_KEY] = {"session_id": session_id, "profile": credentials.public_profile()}
    return session_id


def end_session(session: dict[str, Any], store: TokenStore) -> None:
    """Drop the stored tokens and clear the session."""
    data = session.get(SESSION_KEY) or {}
    store.discard(data.get("session_id"))
    session.clear()


def lookup_session(session: Mapping[str, Any], store: TokenStore) -> UserCredentials | None:
    """Return the credentials behind a session, or None if there are none."""
    data = session.get(SESSION_KEY)
    if not data:
        return None
    return store.get(data.get("session_id"))


def credentials_from_session(session: Mapping[str, Any], store: TokenStore) -> UserCredentials:
    """Extract credentials for a session.

    Raises:
        UnauthenticatedError: If the session holds no known user.
        TokenMissingError: If the stored user has no access token.
    """
    credentials = lookup_session(session, store)
    if credentials is None:
        raise UnauthenticatedError()
    if not credentials.access_token:
        raise TokenMissingError()
    return credentials
