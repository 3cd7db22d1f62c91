"""Google Drive API client implementation."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from sheet_relay.exceptions import RemoteAPIError
from sheet_relay.google.oauth import build_service

logger = logging.getLogger(__name__)

GOOGLE_SHEET_MIME_TYPE = "application/vnd.google-apps.spreadsheet"
DEFAULT_SOURCE_NAME = "Spreadsheet"
FILE_FIELDS = "id, name, mimeType, webViewLink, webContentLink"


def public_url(file_id: str) -> str:
    """Direct edit URL for a spreadsheet shared with anyone holding the link."""
    return f"https://docs.google.com/spreadsheets/d/{file_id}/edit?usp=sharing"


@dataclass(frozen=True)
class Permission:
    """A Drive permission as returned by permissions.create."""

    id: str
    type: str
    role: str

    def to_dict(self) -> dict[str, str]:
        return {
            "permissionId": self.id,
            "permissionType": self.type,
            "permissionRole": self.role,
        }


@dataclass
class DriveFile:
    """Represents a Google Drive file."""

    id: str
    name: str
    web_view_link: str | None = None
    web_content_link: str | None = None
    mime_type: str | None = None
    is_public: bool = False
    public_url: str | None = None
    permission: Permission | None = None
    permission_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "webViewLink": self.web_view_link,
            "webContentLink": self.web_content_link,
            "isPublic": self.is_public,
        }
        if self.public_url:
            data["publicUrl"] = self.public_url
        if self.permission:
            data["publicPermissions"] = self.permission.to_dict()
        if self.permission_error:
            data["publicPermissionError"] = self.permission_error
        return data


def _error_reason(error: Exception) -> tuple[str, int | None]:
    """Extract the provider message and status from an API error."""
    if isinstance(error, HttpError):
        reason = getattr(error, "reason", None) or str(error)
        return reason, error.resp.status
    return str(error), None


class DriveClient:
    """Google Drive API client bound to one access token.

    Usage:
        client = DriveClient(access_token)

        # Copy an existing spreadsheet
        copy = client.copy_file(source_id, "Quarterly report")

        # Upload a CSV and convert it to a Google Sheet
        sheet = client.create_spreadsheet(content, "text/csv", "report.csv")

        # Share it with anyone holding the link
        client.set_public_permission(sheet.id)
    """

    def __init__(
        self,
        access_token: str,
        service_factory: Callable[[str, str, str], Any] = build_service,
    ) -> None:
        """Initialize Drive client.

        Args:
            access_token: Bearer token of the calling user.
            service_factory: Builds a Google API service from (name, version, token).
        """
        self._access_token = access_token
        self._service_factory = service_factory
        self._service: Any = None

    def _get_service(self) -> Any:
        """Get or create Drive API service."""
        if self._service is None:
            self._service = self._service_factory("drive", "v3", self._access_token)
        return self._service

    # =========================================================================
    # Files
    # =========================================================================

    def get_file(self, file_id: str) -> DriveFile | None:
        """Get a specific file by ID.

        Args:
            file_id: Drive file ID.

        Returns:
            DriveFile or None if the file cannot be read.
        """
        service = self._get_service()
        try:
            result = service.files().get(fileId=file_id, fields=FILE_FIELDS).execute()
            return self._parse_file(result)
        except Exception as e:
            logger.warning(f"Could not read metadata for file {file_id}: {e}")
            return None

    def copy_file(self, source_id: str, new_name: str | None = None) -> DriveFile:
        """Copy a file in the user's Drive.

        Args:
            source_id: ID of the file to copy.
            new_name: Name for the copy. Defaults to "Copy of <original name>".

        Returns:
            The newly created copy.

        Raises:
            RemoteAPIError: If the copy fails.
        """
        service = self._get_service()
        logger.info(f"Copying file {source_id}")

        source = self.get_file(source_id)
        original_name = source.name if source else DEFAULT_SOURCE_NAME

        body = {"name": new_name or f"Copy of {original_name}"}
        try:
            result = (
                service.files()
                .copy(fileId=source_id, body=body, fields=FILE_FIELDS)
                .execute()
            )
        except Exception as e:
            reason, status = _error_reason(e)
            raise RemoteAPIError(
                f"Failed to copy Google Sheet (ID: {source_id}). Reason: {reason}",
                provider_status=status,
            ) from e

        copied = self._parse_file(result)
        logger.info(f"Copied {source_id} to {copied.id} ({copied.name})")
        return copied

    def create_spreadsheet(self, content: bytes, mime_type: str, name: str) -> DriveFile:
        """Upload bytes and convert them to a Google Sheet in one call.

        Args:
            content: Raw file contents (xls, xlsx or csv).
            mime_type: MIME type of the uploaded content.
            name: Name of the resulting spreadsheet.

        Returns:
            Created DriveFile.

        Raises:
            RemoteAPIError: If the upload fails.
        """
        service = self._get_service()
        logger.info(f"Uploading {name} ({len(content)} bytes, {mime_type})")

        metadata = {"name": name, "mimeType": GOOGLE_SHEET_MIME_TYPE}
        media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mime_type, resumable=False)

        try:
            result = (
                service.files()
                .create(body=metadata, media_body=media, fields=FILE_FIELDS)
                .execute()
            )
        except Exception as e:
            reason, status = _error_reason(e)
            raise RemoteAPIError(
                f"Failed to upload spreadsheet. Reason: {reason}",
                provider_status=status,
            ) from e

        created = self._parse_file(result)
        logger.info(f"Uploaded spreadsheet {created.id}: {public_url(created.id)}")
        return created

    # =========================================================================
    # Permissions
    # =========================================================================

    def get_permissions(self, file_id: str) -> list[dict[str, Any]] | None:
        """Read the current permissions of a file, for diagnostics only.

        Returns:
            List of permission dicts, or None if they cannot be read.
        """
        service = self._get_service()
        try:
            result = (
                service.files()
                .get(fileId=file_id, fields="id, name, mimeType, permissions")
                .execute()
            )
        except Exception as e:
            logger.warning(f"Could not check permissions of file {file_id}: {e}")
            return None

        permissions = result.get("permissions", [])
        logger.debug(f"Current permissions of {file_id}: {json.dumps(permissions)}")
        return permissions

    def set_public_permission(self, file_id: str) -> Permission:
        """Grant write access to anyone with the link.

        The file stays undiscoverable in search; only holders of the URL can
        open it.

        Args:
            file_id: Drive file ID.

        Returns:
            The created permission.

        Raises:
            RemoteAPIError: If the permission cannot be created.
        """
        service = self._get_service()
        logger.info(f"Setting public permissions for file {file_id}")

        self.get_permissions(file_id)

        body = {"type": "anyone", "role": "writer", "allowFileDiscovery": False}
        try:
            result = (
                service.permissions()
                .create(
                    fileId=file_id,
                    body=body,
                    fields="id, type, role",
                    supportsAllDrives=True,
                )
                .execute()
            )
        except Exception as e:
            reason, status = _error_reason(e)
            raise RemoteAPIError(
                f"Failed to make file public (ID: {file_id}). Reason: {reason}",
                provider_status=status,
            ) from e

        permission = Permission(
            id=result.get("id", ""),
            type=result.get("type", "anyone"),
            role=result.get("role", "writer"),
        )
        logger.info(f"Applied {permission.role} permission {permission.id} to {file_id}")
        return permission

    def _parse_file(self, data: dict) -> DriveFile:
        """Parse file from API response."""
        return DriveFile(
            id=data["id"],
            name=data.get("name", ""),
            web_view_link=data.get("webViewLink"),
            web_content_link=data.get("webContentLink"),
            mime_type=data.get("mimeType"),
        )


def verify_public_access(file_id: str, client: httpx.Client | None = None) -> bool:
    """Check that a file's public URL answers without authentication.

    Redirects are not followed and count as reachable: Google redirects even
    for files that are genuinely public. Never raises.

    Args:
        file_id: Drive file ID.
        client: HTTP client to use. A temporary one is created if omitted.

    Returns:
        True if the public URL answered with a status below 400.
    """
    url = public_url(file_id)
    logger.info(f"Verifying public access to {url}")

    try:
        if client is None:
            with httpx.Client(follow_redirects=False) as temporary:
                response = temporary.get(url)
        else:
            response = client.get(url, follow_redirects=False)
    except httpx.HTTPError as e:
        logger.warning(f"Public access verification failed for {file_id}: {e}")
        return False

    if response.status_code >= 400:
        logger.warning(
            f"Public access check for {file_id} returned status {response.status_code}"
        )
        return False

    if response.status_code == 200:
        logger.info(f"File {file_id} appears to be publicly accessible")
    else:
        logger.info(f"Public access check for {file_id} returned status {response.status_code}")
    return True
