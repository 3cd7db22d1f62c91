"""Tests for the n8n webhook forwarder."""

import httpx
import pytest

from sheet_relay.exceptions import RemoteAPIError
from sheet_relay.n8n import SOURCE_TAG, WebhookForwarder, build_webhook_url


def recording_forwarder(response: httpx.Response, seen: list) -> WebhookForwarder:
    def handler(request):
        seen.append(request)
        return response

    return WebhookForwarder(client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestBuildWebhookUrl:
    """Test query string construction."""

    def test_appends_fixed_parameters(self):
        url = httpx.URL(build_webhook_url("https://n8n.example/webhook/abc", "sheet-1"))
        assert url.path == "/webhook/abc"
        assert url.params["spreadsheetId"] == "sheet-1"
        assert url.params["source"] == SOURCE_TAG
        assert url.params["timestamp"].endswith("Z")

    def test_merges_with_existing_query(self):
        url = build_webhook_url("https://n8n.example/webhook/abc?mode=test", "sheet-1")
        assert url.startswith("https://n8n.example/webhook/abc?mode=test&spreadsheetId=sheet-1")

    def test_skips_none_and_encodes_booleans(self):
        url = httpx.URL(
            build_webhook_url(
                "https://n8n.example/webhook/abc",
                "sheet-1",
                {"notes": "two words", "webViewLink": None, "isPublic": True, "count": 3},
            )
        )
        assert url.params["notes"] == "two words"
        assert "webViewLink" not in url.params
        assert url.params["isPublic"] == "true"
        assert url.params["count"] == "3"


class TestWebhookForwarder:
    """Test the single GET request."""

    def test_forward_returns_json_body(self):
        seen = []
        forwarder = recording_forwarder(httpx.Response(200, json={"ok": True}), seen)

        result = forwarder.forward("sheet-1", "https://n8n.example/webhook/abc", {"a": "b"})

        assert result == {"ok": True}
        assert len(seen) == 1
        assert seen[0].method == "GET"
        assert seen[0].url.params["a"] == "b"

    def test_forward_returns_text_body(self):
        forwarder = recording_forwarder(httpx.Response(200, text="Workflow started"), [])
        assert forwarder.forward("sheet-1", "https://n8n.example/webhook/abc") == "Workflow started"

    def test_non_2xx_raises_without_retry(self):
        seen = []
        forwarder = recording_forwarder(httpx.Response(404, text="not registered"), seen)

        with pytest.raises(RemoteAPIError, match="status 404") as excinfo:
            forwarder.forward("sheet-1", "https://n8n.example/webhook/abc")

        assert excinfo.value.provider_status == 404
        assert len(seen) == 1

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("name resolution failed", request=request)

        forwarder = WebhookForwarder(client=httpx.Client(transport=httpx.MockTransport(handler)))
        with pytest.raises(RemoteAPIError, match="name resolution failed"):
            forwarder.forward("sheet-1", "https://n8n.example/webhook/abc")

    def test_context_manager(self):
        with WebhookForwarder() as forwarder:
            assert isinstance(forwarder, WebhookForwarder)
