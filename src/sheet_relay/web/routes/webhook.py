"""Webhook endpoints called by n8n and other automation tools.

These routes do not use the browser session. ``/webhook/sheet`` is gated
by the shared WEBHOOK_TOKEN and reads with the service account.
"""

import logging
import secrets
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from sheet_relay.config import Settings
from sheet_relay.exceptions import RemoteAPIError
from sheet_relay.google import GoogleAuthError
from sheet_relay.sheets import DEFAULT_RANGE, SheetsClient, rows_to_records
from sheet_relay.web.deps import get_app_settings, get_service_token, get_sheets_factory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["Webhook"])


def _token_matches(given: str | None, expected: str | None) -> bool:
    if not given or not expected:
        return False
    return secrets.compare_digest(given.encode(), expected.encode())


@router.get("/sheet")
def get_sheet_data(
    spreadsheet_id: str | None = Query(None, alias="spreadsheetId"),
    range_notation: str | None = Query(None, alias="range"),
    webhook_token: str | None = Query(None, alias="webhookToken"),
    settings: Settings = Depends(get_app_settings),
    sheets_factory: Callable[[str], SheetsClient] = Depends(get_sheets_factory),
    service_token: Callable[[], str] = Depends(get_service_token),
):
    """
    Return the rows of a Google Sheet as header-keyed records.

    Parameters:
        - spreadsheetId: ID of the sheet to read (required)
        - range: A1 notation, defaults to "Sheet1"
        - webhookToken: Must match WEBHOOK_TOKEN
    """
    if not _token_matches(webhook_token, settings.webhook_token):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": "Invalid webhook token"},
        )

    if not spreadsheet_id:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Missing required parameter: spreadsheetId"},
        )

    range_notation = range_notation or DEFAULT_RANGE
    try:
        rows = sheets_factory(service_token()).read_range(spreadsheet_id, range_notation)
    except (RemoteAPIError, GoogleAuthError) as e:
        logger.error(f"Webhook error: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to read Google Sheet", "message": str(e)},
        )

    records = rows_to_records(rows)
    return {
        "sheetId": spreadsheet_id,
        "range": range_notation,
        "rowCount": len(records),
        "data": records,
    }


@router.post("/n8n")
def receive_n8n(request: Request, payload: Any = Body(None)):
    """Acknowledge data pushed from an n8n HTTP Request node."""
    headers = {
        name: value
        for name, value in request.headers.items()
        if name not in ("authorization", "cookie")
    }
    logger.info("Received n8n webhook data")
    logger.info(f"Headers: {headers}")
    logger.info(f"Body: {payload}")
    return {"message": "Webhook received successfully"}
