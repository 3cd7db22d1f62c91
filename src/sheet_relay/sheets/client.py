"""Google Sheets API client implementation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from googleapiclient.errors import HttpError

from sheet_relay.exceptions import RemoteAPIError
from sheet_relay.google.oauth import build_service

logger = logging.getLogger(__name__)

DEFAULT_RANGE = "Sheet1"


class SheetsClient:
    """Read-only Google Sheets client bound to one access token.

    Usage:
        client = SheetsClient(access_token)
        rows = client.read_range(spreadsheet_id, "Sheet1!A1:C10")
        records = rows_to_records(rows)
    """

    def __init__(
        self,
        access_token: str,
        service_factory: Callable[[str, str, str], Any] = build_service,
    ) -> None:
        self._access_token = access_token
        self._service_factory = service_factory
        self._service: Any = None

    def _get_service(self) -> Any:
        """Get or create Sheets API service."""
        if self._service is None:
            self._service = self._service_factory("sheets", "v4", self._access_token)
        return self._service

    def read_range(
        self,
        spreadsheet_id: str,
        range_notation: str = DEFAULT_RANGE,
    ) -> list[list[Any]]:
        """Read values from a range.

        Args:
            spreadsheet_id: Spreadsheet ID.
            range_notation: A1 notation (e.g., "Sheet1!A1:C10").

        Returns:
            2D list of cell values; empty if the range holds no data.

        Raises:
            RemoteAPIError: If the Sheets API call fails.
        """
        service = self._get_service()
        logger.info(f"Reading sheet {spreadsheet_id}, range {range_notation}")
        try:
            result = (
                service.spreadsheets()
                .values()
                .get(spreadsheetId=spreadsheet_id, range=range_notation)
                .execute()
            )
        except Exception as e:
            status = e.resp.status if isinstance(e, HttpError) else None
            raise RemoteAPIError(
                f"Failed to read Google Sheet (ID: {spreadsheet_id}). Reason: {e}",
                provider_status=status,
            ) from e

        values = result.get("values", [])
        logger.info(f"Read {len(values)} rows from sheet {spreadsheet_id}")
        return values


def rows_to_records(rows: list[list[Any]]) -> list[dict[str, Any]]:
    """Convert a 2D range into records keyed by the header row.

    The header length is the row width: short rows are padded with None,
    and empty cells become None.
    """
    if not rows:
        return []

    headers = rows[0]
    records = []
    for row in rows[1:]:
        record = {}
        for index, header in enumerate(headers):
            value = row[index] if index < len(row) else None
            record[header] = None if value in (None, "") else value
        records.append(record)
    return records
