"""FastAPI dependencies.

Every remote-facing collaborator is provided through a dependency so tests
can swap it with ``app.dependency_overrides``.
"""

from collections.abc import Callable, Iterator

from fastapi import Depends, Request

from sheet_relay.config import Settings
from sheet_relay.drive import DriveClient, verify_public_access
from sheet_relay.google import (
    GoogleOAuth,
    GoogleServiceAccount,
    TokenStore,
    UserCredentials,
    credentials_from_session,
)
from sheet_relay.n8n import WebhookForwarder
from sheet_relay.sheets import SheetsClient
from sheet_relay.upload import UploadFlow


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_store(request: Request) -> TokenStore:
    return request.app.state.token_store


def get_credentials(
    request: Request, store: TokenStore = Depends(get_token_store)
) -> UserCredentials:
    """Require a session holding a user with an access token."""
    return credentials_from_session(request.session, store)


def get_oauth(settings: Settings = Depends(get_app_settings)) -> GoogleOAuth:
    return GoogleOAuth(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        redirect_uri=settings.google_callback_url,
    )


def get_drive_factory() -> Callable[[str], DriveClient]:
    return DriveClient


def get_access_verifier() -> Callable[[str], bool]:
    return verify_public_access


def get_sheets_factory() -> Callable[[str], SheetsClient]:
    return SheetsClient


def get_forwarder() -> Iterator[WebhookForwarder]:
    with WebhookForwarder() as forwarder:
        yield forwarder


def get_service_token(settings: Settings = Depends(get_app_settings)) -> Callable[[], str]:
    """Return a callable fetching a service-account token on demand."""

    def fetch() -> str:
        auth = GoogleServiceAccount(settings.service_account_file, scopes=["sheets_readonly"])
        return auth.get_access_token()

    return fetch


def get_upload_flow(
    settings: Settings = Depends(get_app_settings),
    forwarder: WebhookForwarder = Depends(get_forwarder),
    drive_factory: Callable[[str], DriveClient] = Depends(get_drive_factory),
    verify_access: Callable[[str], bool] = Depends(get_access_verifier),
) -> UploadFlow:
    return UploadFlow(
        forwarder=forwarder,
        webhook_url=settings.n8n_webhook_url,
        drive_factory=drive_factory,
        verify_access=verify_access,
        propagation_delay=settings.permission_propagation_delay,
    )
