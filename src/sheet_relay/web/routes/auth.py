"""Google login, session check and logout."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from sheet_relay.exceptions import InternalError
from sheet_relay.google import (
    GoogleOAuth,
    TokenError,
    TokenStore,
    end_session,
    lookup_session,
    start_session,
)
from sheet_relay.web.deps import get_oauth, get_token_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

SESSION_COOKIE = "sheet_relay_session"
STATE_KEY = "oauth_state"
LOGIN_FAILED_PATH = "/auth/login-failed"


def _login_failed() -> RedirectResponse:
    return RedirectResponse(LOGIN_FAILED_PATH, status_code=status.HTTP_302_FOUND)


@router.get("/google")
def login(request: Request, oauth: GoogleOAuth = Depends(get_oauth)):
    """Redirect the browser to Google consent."""
    authorization_url, state = oauth.get_authorization_url()
    request.session[STATE_KEY] = state
    return RedirectResponse(authorization_url, status_code=status.HTTP_302_FOUND)


@router.get("/google/callback")
def callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    oauth: GoogleOAuth = Depends(get_oauth),
    store: TokenStore = Depends(get_token_store),
):
    """Exchange the authorization code and start the session."""
    expected_state = request.session.pop(STATE_KEY, None)

    if error:
        logger.warning(f"Google login denied: {error}")
        return _login_failed()

    if not code or not state or state != expected_state:
        logger.warning("Google login callback with missing code or mismatched state")
        return _login_failed()

    try:
        credentials = oauth.exchange_code(code)
    except TokenError as e:
        logger.error(f"Google login failed: {e}")
        return _login_failed()

    start_session(request.session, store, credentials)
    return RedirectResponse("/", status_code=status.HTTP_302_FOUND)


@router.get("/login-failed", response_class=HTMLResponse)
def login_failed():
    return HTMLResponse("<h1>Login Failed</h1>", status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/check")
def check(request: Request, store: TokenStore = Depends(get_token_store)):
    """Report whether the session is authenticated."""
    user = lookup_session(request.session, store)
    if user is None:
        return {"isAuthenticated": False}
    return {"isAuthenticated": True, "user": user.public_profile()}


@router.get("/logout", response_class=HTMLResponse)
def logout(request: Request, store: TokenStore = Depends(get_token_store)):
    """Destroy the session and clear its cookie."""
    try:
        end_session(request.session, store)
    except Exception as e:
        logger.error(f"Session destruction error: {e}")
        raise InternalError("Could not log out.") from e

    response = HTMLResponse('<h1>Logged Out</h1><a href="/">Home</a>')
    response.delete_cookie(SESSION_COOKIE)
    return response
