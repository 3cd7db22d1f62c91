"""n8n workflow webhook client.

Forwards spreadsheet identifiers to an n8n Webhook node as query parameters
of a single GET request.
"""

import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlencode

import httpx

from sheet_relay.exceptions import RemoteAPIError

logger = logging.getLogger(__name__)

SOURCE_TAG = "RetailSyncSaaS"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_webhook_url(
    webhook_url: str,
    spreadsheet_id: str,
    metadata: dict[str, Any] | None = None,
) -> str:
    """Append the forwarding payload to a webhook URL.

    Metadata entries whose value is None are skipped.
    """
    params = [
        ("spreadsheetId", spreadsheet_id),
        ("timestamp", _timestamp()),
        ("source", SOURCE_TAG),
    ]
    for key, value in (metadata or {}).items():
        if value is not None:
            params.append((key, _format_value(value)))

    separator = "&" if "?" in webhook_url else "?"
    return f"{webhook_url}{separator}{urlencode(params)}"


class WebhookForwarder:
    """Sends spreadsheet identifiers to an n8n webhook.

    Example:
        >>> with WebhookForwarder() as forwarder:
        ...     forwarder.forward("1AbC", "https://n8n.example/webhook/xyz", {"notes": "hi"})
    """

    def __init__(self, client: httpx.Client | None = None):
        """Initialize the forwarder.

        Args:
            client: HTTP client to use. A default one is created if omitted.
        """
        self._client = client or httpx.Client()

    def forward(
        self,
        spreadsheet_id: str,
        webhook_url: str,
        metadata: dict[str, Any] | None = None,
    ) -> Any:
        """Send one GET request carrying the spreadsheet ID and metadata.

        Args:
            spreadsheet_id: ID of the Google Sheet.
            webhook_url: n8n webhook URL, with or without a query string.
            metadata: Extra key/value pairs to send.

        Returns:
            Parsed JSON response body, or the raw text if it is not JSON.

        Raises:
            RemoteAPIError: If the request fails or returns a non-2xx status.
        """
        url = build_webhook_url(webhook_url, spreadsheet_id, metadata)
        logger.info(f"Sending spreadsheet {spreadsheet_id} to n8n webhook {webhook_url}")

        try:
            response = self._client.get(url)
        except httpx.HTTPError as e:
            raise RemoteAPIError(f"Failed to send data to n8n: {e}") from e

        if not response.is_success:
            raise RemoteAPIError(
                f"Failed to send data to n8n: webhook returned status {response.status_code}",
                provider_status=response.status_code,
            )

        logger.info(f"n8n webhook answered with status {response.status_code}")
        try:
            return response.json()
        except ValueError:
            return response.text

    def close(self):
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
