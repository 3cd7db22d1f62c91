"""n8n workflow webhook forwarding."""

from sheet_relay.n8n.client import SOURCE_TAG, WebhookForwarder, build_webhook_url

__all__ = ["WebhookForwarder", "build_webhook_url", "SOURCE_TAG"]
