"""Google Sheets read access.

Usage:
    from sheet_relay.sheets import SheetsClient, rows_to_records

    rows = SheetsClient(access_token).read_range(spreadsheet_id, "Sheet1")
    records = rows_to_records(rows)
"""

from __future__ import annotations

from sheet_relay.sheets.client import DEFAULT_RANGE, SheetsClient, rows_to_records

__all__ = ["SheetsClient", "rows_to_records", "DEFAULT_RANGE"]
