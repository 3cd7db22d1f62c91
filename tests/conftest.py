"""Shared fixtures and fakes."""

from unittest.mock import MagicMock

import pytest

from sheet_relay.config import Settings
from sheet_relay.drive import DriveClient, DriveFile, Permission
from sheet_relay.google import UserCredentials
from sheet_relay.n8n import WebhookForwarder


@pytest.fixture
def settings(tmp_path):
    """Settings that never touch the real environment or network."""
    return Settings(
        google_client_id="test-client-id.apps.googleusercontent.com",
        google_client_secret="test-client-secret",
        google_callback_url="http://testserver/auth/google/callback",
        session_secret="test-session-secret",
        webhook_token="hook-token",
        n8n_webhook_url="https://n8n.example/webhook/abc",
        service_account_file=tmp_path / "service_account_key.json",
        permission_propagation_delay=0,
    )


@pytest.fixture
def user():
    return UserCredentials(
        subject_id="1234567890",
        display_name="Ada Lovelace",
        email="ada@example.com",
        access_token="user-access-token",
        refresh_token="user-refresh-token",
    )


@pytest.fixture
def drive():
    """A DriveClient double whose happy path creates and shares 'sheet-1'."""
    fake = MagicMock(spec=DriveClient)
    fake.create_spreadsheet.return_value = DriveFile(
        id="sheet-1",
        name="data.csv",
        web_view_link="https://docs.google.com/spreadsheets/d/sheet-1/edit",
    )
    fake.set_public_permission.return_value = Permission(
        id="anyoneWithLink", type="anyone", role="writer"
    )
    fake.get_file.return_value = DriveFile(
        id="sheet-1",
        name="data.csv",
        web_view_link="https://docs.google.com/spreadsheets/d/sheet-1/edit?usp=drivesdk",
        web_content_link=None,
    )
    return fake


@pytest.fixture
def forwarder():
    fake = MagicMock(spec=WebhookForwarder)
    fake.forward.return_value = {"message": "Workflow was started"}
    return fake
