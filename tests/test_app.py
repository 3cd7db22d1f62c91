"""Tests for the HTTP routes."""

import base64
import json
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from sheet_relay.config import DEFAULT_SESSION_SECRET
from sheet_relay.drive import DriveFile
from sheet_relay.exceptions import ConfigurationError, RemoteAPIError
from sheet_relay.google import TokenError, TokenStore, UserCredentials
from sheet_relay.sheets import SheetsClient
from sheet_relay.web import create_app
from sheet_relay.web.deps import (
    get_access_verifier,
    get_credentials,
    get_drive_factory,
    get_forwarder,
    get_oauth,
    get_service_token,
    get_sheets_factory,
)
from sheet_relay.web.routes.auth import SESSION_COOKIE

MB = 1024 * 1024


class FakeOAuth:
    """Stands in for Google's consent screen and token endpoint."""

    def __init__(self, credentials: UserCredentials):
        self.credentials = credentials
        self.exchanged = []

    def get_authorization_url(self):
        return "https://accounts.google.com/o/oauth2/v2/auth?state=state-123", "state-123"

    def exchange_code(self, code):
        self.exchanged.append(code)
        if code == "bad-code":
            raise TokenError("invalid_grant")
        return self.credentials


@pytest.fixture
def app(settings, drive, forwarder):
    app = create_app(settings)
    app.dependency_overrides[get_drive_factory] = lambda: lambda token: drive
    app.dependency_overrides[get_forwarder] = lambda: forwarder
    app.dependency_overrides[get_access_verifier] = lambda: lambda file_id: True
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def authed(app, client, user):
    app.dependency_overrides[get_credentials] = lambda: user
    return client


def login(client, code="auth-code"):
    client.get("/auth/google", follow_redirects=False)
    return client.get(
        "/auth/google/callback",
        params={"code": code, "state": "state-123"},
        follow_redirects=False,
    )


class TestUploadRoute:
    """Test POST /api/sheets/upload."""

    def test_upload_success(self, authed, drive, forwarder):
        content = b"name,qty\n" + b"apple,3\n" * (2 * MB // 8)
        response = authed.post(
            "/api/sheets/upload",
            files={"spreadsheet": ("data.csv", content, "text/csv")},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Spreadsheet uploaded and automatically sent to n8n workflow!"
        assert body["spreadsheet"]["id"] == "sheet-1"
        assert body["spreadsheet"]["isPublic"] is True
        assert body["n8nForwarding"]["success"] is True
        assert body["n8nForwarding"]["webhookUrl"] == "https://n8n.example/webhook/abc"
        assert drive.create_spreadsheet.call_args.args[0] == content
        forwarder.forward.assert_called_once()

    def test_custom_file_name(self, authed, drive):
        response = authed.post(
            "/api/sheets/upload",
            files={"spreadsheet": ("data.csv", b"a,b\n", "text/csv")},
            data={"fileName": "Inventory"},
        )
        assert response.status_code == 201
        assert drive.create_spreadsheet.call_args.args[2] == "Inventory"

    def test_disallowed_type_rejected_before_drive(self, authed, drive, forwarder):
        response = authed.post(
            "/api/sheets/upload",
            files={"spreadsheet": ("report.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 400
        assert "Disallowed file type" in response.json()["message"]
        drive.create_spreadsheet.assert_not_called()
        forwarder.forward.assert_not_called()

    def test_oversized_file_rejected(self, authed, drive):
        response = authed.post(
            "/api/sheets/upload",
            files={"spreadsheet": ("big.csv", b"x" * (10 * MB + 1), "text/csv")},
        )
        assert response.status_code == 400
        assert "File too large" in response.json()["message"]
        drive.create_spreadsheet.assert_not_called()

    def test_declared_length_over_cap_rejected_before_route(self, client, drive):
        """Rejected from Content-Length alone, ahead of the login check."""
        response = client.post(
            "/api/sheets/upload",
            files={"spreadsheet": ("big.csv", b"x" * (10 * MB + 128 * 1024), "text/csv")},
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith("File upload error: File too large")
        drive.create_spreadsheet.assert_not_called()

    def test_no_file(self, authed):
        response = authed.post("/api/sheets/upload", data={"fileName": "Inventory"})
        assert response.status_code == 400
        assert response.json()["message"] == "No file uploaded. Please upload a spreadsheet file."

    def test_requires_login(self, client, drive):
        response = client.post(
            "/api/sheets/upload",
            files={"spreadsheet": ("data.csv", b"a,b\n", "text/csv")},
        )
        assert response.status_code == 401
        assert response.json() == {"message": "Unauthorized. Please log in."}
        drive.create_spreadsheet.assert_not_called()

    def test_forward_failure_still_created(self, authed, forwarder):
        forwarder.forward.side_effect = RemoteAPIError("webhook returned status 500")

        response = authed.post(
            "/api/sheets/upload",
            files={"spreadsheet": ("data.csv", b"a,b\n", "text/csv")},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == (
            "Spreadsheet uploaded successfully, but failed to send to n8n workflow."
        )
        assert body["n8nForwarding"]["success"] is False
        assert body["n8nForwarding"]["error"] == "webhook returned status 500"

    def test_create_failure(self, authed, drive):
        drive.create_spreadsheet.side_effect = RemoteAPIError("Reason: quota exceeded")

        response = authed.post(
            "/api/sheets/upload",
            files={"spreadsheet": ("data.csv", b"a,b\n", "text/csv")},
        )

        assert response.status_code == 500
        assert response.json() == {
            "message": "Failed to upload spreadsheet to Google Drive.",
            "error": "Reason: quota exceeded",
        }


class TestCopyRoute:
    """Test POST /api/sheets/copy."""

    def test_missing_source(self, authed, drive):
        response = authed.post("/api/sheets/copy", json={})
        assert response.status_code == 400
        assert response.json() == {"message": "Missing required field: sourceSheetId"}
        drive.copy_file.assert_not_called()

    def test_malformed_body_reports_errors_as_list(self, authed, drive):
        response = authed.post("/api/sheets/copy", json=["not", "an", "object"])

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Invalid request."
        assert isinstance(body["error"], list)
        assert body["error"]
        assert all("msg" in error for error in body["error"])
        drive.copy_file.assert_not_called()

    def test_copy_success(self, authed, drive):
        drive.copy_file.return_value = DriveFile(id="copy-1", name="Q3")

        response = authed.post(
            "/api/sheets/copy", json={"sourceSheetId": "src", "newSheetName": "Q3"}
        )

        assert response.status_code == 201
        assert response.json()["message"] == "Sheet copied successfully!"
        assert response.json()["newSheet"]["id"] == "copy-1"
        drive.copy_file.assert_called_once_with("src", "Q3")

    def test_copy_failure(self, authed, drive):
        drive.copy_file.side_effect = RemoteAPIError("File not found: src")

        response = authed.post("/api/sheets/copy", json={"sourceSheetId": "src"})

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to copy the Google Sheet."
        assert response.json()["error"] == "File not found: src"


class TestSendToN8nRoute:
    """Test POST /api/sheets/send-to-n8n."""

    def test_missing_spreadsheet_id(self, authed):
        response = authed.post(
            "/api/sheets/send-to-n8n", json={"n8nWebhookUrl": "https://n8n.example/x"}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Missing required field: spreadsheetId"

    def test_missing_webhook_url(self, authed):
        response = authed.post("/api/sheets/send-to-n8n", json={"spreadsheetId": "sheet-1"})
        assert response.status_code == 400
        assert response.json()["message"] == "Missing required field: n8nWebhookUrl"

    def test_forwards(self, authed, forwarder):
        response = authed.post(
            "/api/sheets/send-to-n8n",
            json={
                "spreadsheetId": "sheet-1",
                "n8nWebhookUrl": "https://n8n.example/x",
                "metadata": {"notes": "hi"},
            },
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Spreadsheet ID successfully sent to n8n workflow!",
            "result": {"message": "Workflow was started"},
        }
        forwarder.forward.assert_called_once_with(
            "sheet-1", "https://n8n.example/x", {"notes": "hi"}
        )

    def test_forward_failure(self, authed, forwarder):
        forwarder.forward.side_effect = RemoteAPIError("webhook returned status 404")
        response = authed.post(
            "/api/sheets/send-to-n8n",
            json={"spreadsheetId": "sheet-1", "n8nWebhookUrl": "https://n8n.example/x"},
        )
        assert response.status_code == 500
        assert response.json()["message"] == "Failed to send spreadsheet ID to n8n workflow."

    def test_requires_login(self, client, forwarder):
        response = client.post(
            "/api/sheets/send-to-n8n",
            json={"spreadsheetId": "sheet-1", "n8nWebhookUrl": "https://n8n.example/x"},
        )
        assert response.status_code == 401
        forwarder.forward.assert_not_called()


class TestSheetWebhook:
    """Test GET /webhook/sheet."""

    @pytest.fixture
    def sheets(self, app):
        fake = MagicMock(spec=SheetsClient)
        factory = MagicMock(return_value=fake)
        fetch_token = MagicMock(return_value="service-token")
        app.dependency_overrides[get_sheets_factory] = lambda: factory
        app.dependency_overrides[get_service_token] = lambda: fetch_token
        fake.factory = factory
        fake.fetch_token = fetch_token
        return fake

    def test_wrong_token(self, client, sheets):
        response = client.get(
            "/webhook/sheet", params={"spreadsheetId": "sheet-1", "webhookToken": "nope"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid webhook token"}
        sheets.fetch_token.assert_not_called()
        sheets.read_range.assert_not_called()

    def test_missing_token(self, client, sheets):
        response = client.get("/webhook/sheet", params={"spreadsheetId": "sheet-1"})
        assert response.status_code == 401

    def test_missing_spreadsheet_id(self, client, sheets):
        response = client.get("/webhook/sheet", params={"webhookToken": "hook-token"})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required parameter: spreadsheetId"}

    def test_returns_records(self, client, sheets):
        sheets.read_range.return_value = [["name", "qty"], ["apple", "3"], ["pear"]]

        response = client.get(
            "/webhook/sheet",
            params={"spreadsheetId": "sheet-1", "webhookToken": "hook-token"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "sheetId": "sheet-1",
            "range": "Sheet1",
            "rowCount": 2,
            "data": [{"name": "apple", "qty": "3"}, {"name": "pear", "qty": None}],
        }
        sheets.factory.assert_called_once_with("service-token")
        sheets.read_range.assert_called_once_with("sheet-1", "Sheet1")

    def test_custom_range(self, client, sheets):
        sheets.read_range.return_value = []
        response = client.get(
            "/webhook/sheet",
            params={
                "spreadsheetId": "sheet-1",
                "range": "Orders!A1:C10",
                "webhookToken": "hook-token",
            },
        )
        assert response.json()["range"] == "Orders!A1:C10"
        assert response.json()["rowCount"] == 0
        assert response.json()["data"] == []

    def test_read_failure(self, client, sheets):
        sheets.read_range.side_effect = RemoteAPIError("Requested entity was not found.")
        response = client.get(
            "/webhook/sheet",
            params={"spreadsheetId": "sheet-1", "webhookToken": "hook-token"},
        )
        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to read Google Sheet",
            "message": "Requested entity was not found.",
        }

    def test_n8n_push_acknowledged(self, client):
        response = client.post("/webhook/n8n", json={"rows": 3})
        assert response.status_code == 200
        assert response.json() == {"message": "Webhook received successfully"}


class TestAuthRoutes:
    """Test login, session check and logout."""

    @pytest.fixture
    def oauth(self, app, user):
        fake = FakeOAuth(user)
        app.dependency_overrides[get_oauth] = lambda: fake
        return fake

    def test_login_redirects_to_google(self, client, oauth):
        response = client.get("/auth/google", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"].startswith("https://accounts.google.com/")

    def test_full_session(self, client, oauth):
        assert client.get("/auth/check").json() == {"isAuthenticated": False}

        response = login(client)
        assert response.status_code == 302
        assert response.headers["location"] == "/"
        assert oauth.exchanged == ["auth-code"]

        check = client.get("/auth/check").json()
        assert check["isAuthenticated"] is True
        assert check["user"]["email"] == "ada@example.com"
        assert "accessToken" not in check["user"]

        protected = client.get("/api/protected")
        assert protected.status_code == 200
        assert "Logged in as ada@example.com" in client.get("/").text

        logout = client.get("/auth/logout")
        assert logout.status_code == 200
        assert "Logged Out" in logout.text
        assert client.get("/auth/check").json() == {"isAuthenticated": False}

    def test_state_mismatch(self, client, oauth):
        client.get("/auth/google", follow_redirects=False)
        response = client.get(
            "/auth/google/callback",
            params={"code": "auth-code", "state": "forged"},
            follow_redirects=False,
        )
        assert response.headers["location"] == "/auth/login-failed"
        assert oauth.exchanged == []

    def test_consent_denied(self, client, oauth):
        response = client.get(
            "/auth/google/callback",
            params={"error": "access_denied"},
            follow_redirects=False,
        )
        assert response.headers["location"] == "/auth/login-failed"
        assert client.get("/auth/login-failed").status_code == 401

    def test_token_exchange_failure(self, client, oauth):
        response = login(client, code="bad-code")
        assert response.headers["location"] == "/auth/login-failed"
        assert client.get("/auth/check").json() == {"isAuthenticated": False}

    def test_session_without_access_token(self, client, oauth):
        oauth.credentials = UserCredentials(
            subject_id="1", display_name="Ada", access_token=None
        )
        login(client)

        response = client.get("/api/protected")

        assert response.status_code == 401
        assert response.json() == {"message": "Access token missing in session."}

    def test_protected_requires_login(self, client):
        response = client.get("/api/protected")
        assert response.status_code == 401
        assert response.json() == {"message": "Unauthorized. Please log in."}

    def test_cookie_carries_no_tokens(self, app, client, oauth):
        login(client)

        cookie = client.cookies.get(SESSION_COOKIE)
        payload = base64.b64decode(cookie.split(".")[0]).decode()

        assert "user-access-token" not in payload
        assert "user-refresh-token" not in payload
        assert json.loads(payload)["user"]["profile"]["email"] == "ada@example.com"
        assert len(app.state.token_store) == 1

    def test_logout_discards_stored_tokens(self, app, client, oauth):
        login(client)
        client.get("/auth/logout")
        assert len(app.state.token_store) == 0

    def test_restart_forgets_sessions(self, app, client, oauth):
        """A valid cookie without server-side tokens is logged out."""
        login(client)
        app.state.token_store = TokenStore()

        assert client.get("/auth/check").json() == {"isAuthenticated": False}
        assert client.get("/api/protected").status_code == 401


class TestCreateApp:
    """Test application startup checks."""

    def test_refuses_default_session_secret(self, settings):
        settings.session_secret = DEFAULT_SESSION_SECRET
        with pytest.raises(ConfigurationError, match="SESSION_SECRET"):
            create_app(settings)

    def test_refuses_empty_session_secret(self, settings):
        settings.session_secret = ""
        with pytest.raises(ConfigurationError):
            create_app(settings)
