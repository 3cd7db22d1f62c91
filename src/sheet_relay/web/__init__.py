"""HTTP boundary: session auth, request validation and response shaping."""

from sheet_relay.web.app import create_app

__all__ = ["create_app"]
