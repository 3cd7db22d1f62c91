"""Authenticated spreadsheet API routes."""

import logging
from collections.abc import Callable

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import JSONResponse

from sheet_relay.drive import DriveClient
from sheet_relay.exceptions import RemoteAPIError, ValidationError
from sheet_relay.google import UserCredentials
from sheet_relay.n8n import WebhookForwarder
from sheet_relay.upload import MAX_UPLOAD_BYTES, UploadedFile, UploadFlow, validate_upload
from sheet_relay.web.deps import (
    get_credentials,
    get_drive_factory,
    get_forwarder,
    get_upload_flow,
)
from sheet_relay.web.errors import error_response
from sheet_relay.web.schemas import CopySheetRequest, SendToN8nRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Sheets"])


@router.get("/protected")
def protected(credentials: UserCredentials = Depends(get_credentials)):
    return {"message": "You have accessed protected data!", "user": credentials.public_profile()}


@router.post("/sheets/copy", status_code=status.HTTP_201_CREATED)
def copy_sheet(
    credentials: UserCredentials = Depends(get_credentials),
    payload: CopySheetRequest | None = None,
    drive_factory: Callable[[str], DriveClient] = Depends(get_drive_factory),
):
    """
    Copy a Google Sheet in the user's Drive.

    Body:
        - sourceSheetId: ID of the sheet to copy (required)
        - newSheetName: Name of the copy (optional)
    """
    payload = payload or CopySheetRequest()
    if not payload.source_sheet_id:
        raise ValidationError("Missing required field: sourceSheetId")

    logger.info(f"Request received to copy sheet {payload.source_sheet_id}")
    try:
        copied = drive_factory(credentials.access_token).copy_file(
            payload.source_sheet_id, payload.new_sheet_name
        )
    except RemoteAPIError as e:
        logger.error(f"Failed to copy sheet: {e}")
        return error_response(500, "Failed to copy the Google Sheet.", e)

    return {"message": "Sheet copied successfully!", "newSheet": copied.to_dict()}


@router.post("/sheets/upload", status_code=status.HTTP_201_CREATED)
def upload_spreadsheet(
    credentials: UserCredentials = Depends(get_credentials),
    spreadsheet: UploadFile | None = File(None),
    file_name: str | None = Form(None, alias="fileName"),
    flow: UploadFlow = Depends(get_upload_flow),
):
    """
    Upload a spreadsheet, convert it to a Google Sheet, share it and
    forward its ID to the n8n workflow.

    Parameters:
        - spreadsheet: .xls, .xlsx or .csv file, at most 10 MB (multipart/form-data)
        - fileName: Name of the resulting sheet (optional)

    Returns 201 whenever the sheet was created; sharing and forwarding
    failures are reported in the body.
    """
    upload = None
    if spreadsheet is not None:
        upload = UploadedFile(
            filename=spreadsheet.filename or "spreadsheet",
            content_type=spreadsheet.content_type or "",
            # One byte past the limit is enough to reject oversized files
            content=spreadsheet.file.read(MAX_UPLOAD_BYTES + 1),
        )
    upload = validate_upload(upload)

    logger.info(f"Request received to upload spreadsheet {upload.filename}")
    try:
        result = flow.run(credentials, upload, file_name=file_name or None)
    except RemoteAPIError as e:
        logger.error(f"Failed to upload spreadsheet: {e}")
        return error_response(500, "Failed to upload spreadsheet to Google Drive.", e)

    return JSONResponse(status_code=status.HTTP_201_CREATED, content=result.to_dict())


@router.post("/sheets/send-to-n8n", dependencies=[Depends(get_credentials)])
def send_to_n8n(
    payload: SendToN8nRequest | None = None,
    forwarder: WebhookForwarder = Depends(get_forwarder),
):
    """
    Send a spreadsheet ID to an n8n workflow.

    Body:
        - spreadsheetId: ID of the Google Sheet (required)
        - n8nWebhookUrl: Target webhook URL (required)
        - metadata: Extra key/value pairs (optional)
    """
    payload = payload or SendToN8nRequest()
    if not payload.spreadsheet_id:
        raise ValidationError("Missing required field: spreadsheetId")
    if not payload.n8n_webhook_url:
        raise ValidationError("Missing required field: n8nWebhookUrl")

    try:
        result = forwarder.forward(
            payload.spreadsheet_id, payload.n8n_webhook_url, payload.metadata
        )
    except RemoteAPIError as e:
        logger.error(f"Failed to send to n8n: {e}")
        return error_response(500, "Failed to send spreadsheet ID to n8n workflow.", e)

    return {"message": "Spreadsheet ID successfully sent to n8n workflow!", "result": result}
