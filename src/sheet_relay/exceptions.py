"""Service error taxonomy.

Every error carries the HTTP status the boundary layer answers with.
"""


class SheetRelayError(Exception):
    """Base exception for sheet-relay errors."""

    status_code = 500


class UnauthenticatedError(SheetRelayError):
    """Raised when the request carries no authenticated session."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized. Please log in."):
        super().__init__(message)


class TokenMissingError(SheetRelayError):
    """Raised when the session is authenticated but holds no access token."""

    status_code = 401

    def __init__(self, message: str = "Access token missing in session."):
        super().__init__(message)


class ValidationError(SheetRelayError):
    """Raised when a request is missing a field or carries a rejected upload."""

    status_code = 400


class RemoteAPIError(SheetRelayError):
    """Raised when Drive, Sheets or the workflow webhook returns an error."""

    def __init__(self, message: str, provider_status: int | None = None):
        self.provider_status = provider_status
        super().__init__(message)


class InternalError(SheetRelayError):
    """Raised for local failures such as session teardown."""


class ConfigurationError(SheetRelayError):
    """Raised at startup when a required setting is missing or unsafe."""
