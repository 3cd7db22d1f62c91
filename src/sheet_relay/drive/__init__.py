"""Google Drive API client bound to a user's access token.

Usage:
    from sheet_relay.drive import DriveClient, verify_public_access

    client = DriveClient(access_token)
    sheet = client.create_spreadsheet(content, "text/csv", "report.csv")
    client.set_public_permission(sheet.id)
    verify_public_access(sheet.id)
"""

from __future__ import annotations

from sheet_relay.drive.client import (
    DriveClient,
    DriveFile,
    Permission,
    public_url,
    verify_public_access,
)

__all__ = ["DriveClient", "DriveFile", "Permission", "public_url", "verify_public_access"]
