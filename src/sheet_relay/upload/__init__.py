"""Spreadsheet upload validation and orchestration."""

from sheet_relay.upload.flow import ForwardingResult, UploadFlow, UploadResult
from sheet_relay.upload.validation import (
    ALLOWED_MIME_TYPES,
    MAX_UPLOAD_BYTES,
    UploadedFile,
    validate_upload,
)

__all__ = [
    "UploadFlow",
    "UploadResult",
    "ForwardingResult",
    "UploadedFile",
    "validate_upload",
    "ALLOWED_MIME_TYPES",
    "MAX_UPLOAD_BYTES",
]
