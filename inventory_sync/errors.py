class SheetSyncError(Exception):
    """
    Base class for failures that abort a whole ingestion call.
    The message is meant to be shown to the user as-is: what failed and what to do about it.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CredentialError(SheetSyncError):
    """API key or access token is missing, invalid or expired (HTTP 401)."""


class AccessDeniedError(SheetSyncError):
    """The document exists but is not shared with the caller (HTTP 403 or an HTML export page)."""


class SheetNotFoundError(SheetSyncError):
    """The spreadsheet ID does not resolve (HTTP 404)."""


class SheetTransportError(SheetSyncError):
    """The request could not be completed or returned an unclassified status."""
