"""FastAPI application factory."""

import logging
from html import escape

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from starlette.middleware.sessions import SessionMiddleware

from sheet_relay import __version__
from sheet_relay.config import DEFAULT_SESSION_SECRET, Settings, get_settings
from sheet_relay.exceptions import ConfigurationError
from sheet_relay.google.credentials import TokenStore, lookup_session
from sheet_relay.upload import MAX_UPLOAD_BYTES
from sheet_relay.web.errors import error_response, register_error_handlers
from sheet_relay.web.routes import auth_router, sheets_router, webhook_router
from sheet_relay.web.routes.auth import SESSION_COOKIE

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/api/sheets/upload"
# Room for the multipart envelope around a file at the size limit
MAX_UPLOAD_REQUEST_BYTES = MAX_UPLOAD_BYTES + 64 * 1024

LOGGED_IN_PAGE = """
<h1>sheet-relay</h1>
<p>Status: Logged in as {user}</p>
<h2>Upload Spreadsheet to Google Drive</h2>
<form action="/api/sheets/upload" method="post" enctype="multipart/form-data">
  <label for="spreadsheet">Spreadsheet file (.xls, .xlsx, .csv):</label>
  <input type="file" id="spreadsheet" name="spreadsheet" accept=".xls,.xlsx,.csv" required>
  <label for="fileName">Custom file name (optional):</label>
  <input type="text" id="fileName" name="fileName">
  <button type="submit">Upload to Google Drive</button>
</form>
<p><a href="/api/protected">Test Protected Route</a></p>
<p><a href="/auth/logout">Logout</a></p>
"""

LOGGED_OUT_PAGE = """
<h1>sheet-relay</h1>
<p>Status: Not logged in</p>
<p><a href="/auth/google">Login with Google</a></p>
"""


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the web application.

    Args:
        settings: Service settings. Loaded from the environment if omitted.

    Raises:
        ConfigurationError: If SESSION_SECRET is unset or left at its placeholder.
    """
    settings = settings or get_settings()
    if not settings.session_secret or settings.session_secret == DEFAULT_SESSION_SECRET:
        raise ConfigurationError(
            "SESSION_SECRET is not set. Refusing to sign sessions with the default secret."
        )

    app = FastAPI(
        title="sheet-relay",
        description="Google Sheets upload and n8n relay service",
        version=__version__,
    )
    app.state.settings = settings
    app.state.token_store = TokenStore()

    @app.middleware("http")
    async def limit_upload_size(request: Request, call_next):
        """Reject oversized uploads from their declared length, before the body is read."""
        if request.method == "POST" and request.url.path == UPLOAD_PATH:
            declared = request.headers.get("content-length", "")
            if declared.isdigit() and int(declared) > MAX_UPLOAD_REQUEST_BYTES:
                logger.warning(f"Rejected upload of {declared} bytes before reading the body")
                return error_response(
                    400,
                    f"File upload error: File too large ({declared} bytes, "
                    f"limit is {MAX_UPLOAD_BYTES} bytes)",
                )
        return await call_next(request)

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=SESSION_COOKIE,
        same_site="lax",
    )

    app.include_router(auth_router)
    app.include_router(sheets_router)
    app.include_router(webhook_router)
    register_error_handlers(app)

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request):
        user = lookup_session(request.session, request.app.state.token_store)
        if user is None:
            return LOGGED_OUT_PAGE
        return LOGGED_IN_PAGE.format(user=escape(user.identity))

    return app
