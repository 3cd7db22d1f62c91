"""Orchestrated spreadsheet upload.

Runs three remote stages in order:

1. create   - upload the file and convert it to a Google Sheet (fatal on error)
2. publicize - share it with anyone holding the link, then verify (annotated on error)
3. forward  - send the spreadsheet ID to the n8n workflow (annotated on error)

Stages are never rolled back: a created file stays in Drive even if later
stages fail.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sheet_relay.drive import DriveClient, DriveFile, public_url, verify_public_access
from sheet_relay.exceptions import RemoteAPIError
from sheet_relay.google.credentials import UserCredentials
from sheet_relay.n8n import WebhookForwarder
from sheet_relay.upload.validation import UploadedFile

logger = logging.getLogger(__name__)


@dataclass
class ForwardingResult:
    """Outcome of the forward stage."""

    success: bool
    webhook_url: str | None
    result: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "webhookUrl": self.webhook_url}
        if self.success:
            data["result"] = self.result
        else:
            data["error"] = self.error
        return data


@dataclass
class UploadResult:
    """Outcome of a completed upload flow."""

    spreadsheet: DriveFile
    forwarding: ForwardingResult

    @property
    def message(self) -> str:
        if self.forwarding.success:
            return "Spreadsheet uploaded and automatically sent to n8n workflow!"
        return "Spreadsheet uploaded successfully, but failed to send to n8n workflow."

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "spreadsheet": self.spreadsheet.to_dict(),
            "n8nForwarding": self.forwarding.to_dict(),
        }


class UploadFlow:
    """Create, publicize and forward an uploaded spreadsheet."""

    def __init__(
        self,
        forwarder: WebhookForwarder,
        webhook_url: str | None,
        drive_factory: Callable[[str], DriveClient] = DriveClient,
        verify_access: Callable[[str], bool] = verify_public_access,
        propagation_delay: float = 2.0,
    ):
        """Initialize the flow.

        Args:
            forwarder: Client used for the forward stage.
            webhook_url: n8n webhook URL; forwarding fails if it is not set.
            drive_factory: Builds a DriveClient from an access token.
            verify_access: Public reachability check, given a file ID.
            propagation_delay: Seconds to wait after sharing before forwarding.
        """
        self.forwarder = forwarder
        self.webhook_url = webhook_url
        self.drive_factory = drive_factory
        self.verify_access = verify_access
        self.propagation_delay = propagation_delay

    def run(
        self,
        credentials: UserCredentials,
        upload: UploadedFile,
        file_name: str | None = None,
        make_public: bool = True,
    ) -> UploadResult:
        """Run the upload flow for one authenticated user.

        Args:
            credentials: The uploading user's credentials.
            upload: Validated file contents.
            file_name: Target name; defaults to the uploaded file's name.
            make_public: Whether to run the publicize stage.

        Returns:
            The created file with publicize and forward annotations.

        Raises:
            RemoteAPIError: If the create stage fails.
        """
        drive = self.drive_factory(credentials.access_token)

        spreadsheet = drive.create_spreadsheet(
            upload.content,
            upload.content_type,
            file_name or upload.filename,
        )

        if make_public:
            self._publicize(drive, spreadsheet)

        forwarding = self._forward(spreadsheet, credentials, upload)
        return UploadResult(spreadsheet=spreadsheet, forwarding=forwarding)

    def _publicize(self, drive: DriveClient, spreadsheet: DriveFile) -> None:
        try:
            permission = drive.set_public_permission(spreadsheet.id)
        except RemoteAPIError as e:
            logger.error(f"Could not make spreadsheet {spreadsheet.id} public: {e}")
            spreadsheet.is_public = False
            spreadsheet.permission_error = str(e)
            return

        spreadsheet.is_public = True
        spreadsheet.permission = permission
        spreadsheet.public_url = public_url(spreadsheet.id)

        refreshed = drive.get_file(spreadsheet.id)
        if refreshed is not None:
            spreadsheet.web_view_link = refreshed.web_view_link or spreadsheet.web_view_link
            spreadsheet.web_content_link = refreshed.web_content_link

        if self.verify_access(spreadsheet.id):
            logger.info(f"Verified public access to spreadsheet {spreadsheet.id}")
        else:
            logger.warning(f"Could not verify public access to spreadsheet {spreadsheet.id}")

        if self.propagation_delay > 0:
            logger.debug(f"Waiting {self.propagation_delay}s for permissions to propagate")
            time.sleep(self.propagation_delay)

    def _forward(
        self,
        spreadsheet: DriveFile,
        credentials: UserCredentials,
        upload: UploadedFile,
    ) -> ForwardingResult:
        if not self.webhook_url:
            logger.error("No n8n webhook URL configured; skipping forwarding")
            return ForwardingResult(
                success=False,
                webhook_url=None,
                error="No n8n webhook URL configured (set N8N_WEBHOOK_URL)",
            )

        metadata = {
            "fileName": spreadsheet.name,
            "webViewLink": spreadsheet.web_view_link,
            "publicUrl": spreadsheet.public_url or public_url(spreadsheet.id),
            "uploadedBy": credentials.identity,
            "sourceFile": upload.filename,
            "isPublic": spreadsheet.is_public,
        }

        try:
            result = self.forwarder.forward(spreadsheet.id, self.webhook_url, metadata)
        except RemoteAPIError as e:
            logger.error(f"Failed to forward spreadsheet {spreadsheet.id} to n8n: {e}")
            return ForwardingResult(success=False, webhook_url=self.webhook_url, error=str(e))

        logger.info(f"Forwarded spreadsheet {spreadsheet.id} to n8n")
        return ForwardingResult(success=True, webhook_url=self.webhook_url, result=result)
