"""Request bodies for the sheet API.

Required fields are optional at the schema level so that a missing field is
reported with the service's own 400 message.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CopySheetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source_sheet_id: str | None = Field(None, alias="sourceSheetId")
    new_sheet_name: str | None = Field(None, alias="newSheetName")


class SendToN8nRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    spreadsheet_id: str | None = Field(None, alias="spreadsheetId")
    n8n_webhook_url: str | None = Field(None, alias="n8nWebhookUrl")
    metadata: dict[str, Any] | None = None
