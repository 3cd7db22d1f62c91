"""Upload acceptance rules."""

from dataclasses import dataclass

from sheet_relay.exceptions import ValidationError

ALLOWED_MIME_TYPES = {
    "application/vnd.ms-excel",  # .xls
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",  # .xlsx
    "text/csv",  # .csv
}
MAX_UPLOAD_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class UploadedFile:
    """A spreadsheet file received from the browser, fully buffered."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def validate_upload(upload: UploadedFile | None) -> UploadedFile:
    """Reject missing, oversized or non-spreadsheet uploads.

    Raises:
        ValidationError: If the upload is not acceptable.
    """
    if upload is None:
        raise ValidationError("No file uploaded. Please upload a spreadsheet file.")

    if upload.content_type not in ALLOWED_MIME_TYPES:
        raise ValidationError(
            f"Disallowed file type: {upload.content_type or 'unknown'}. "
            "Only spreadsheet files (.xls, .xlsx, .csv) are allowed."
        )

    if upload.size > MAX_UPLOAD_BYTES:
        raise ValidationError(
            f"File upload error: File too large ({upload.size} bytes, "
            f"limit is {MAX_UPLOAD_BYTES} bytes)"
        )

    return upload
