"""
Domain errors raised by ingestion, chart derivation and the services.

Each error carries the HTTP status it maps to; main.py registers a single
handler that turns any AnalyticsError into a {"detail": message} response.
None of these are retried - they all stem from caller input.
"""

from fastapi import status


class AnalyticsError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidFormatError(AnalyticsError):
    """Workbook could not be decoded at all (corrupt or unsupported format)."""
    default_message = "Invalid Excel file format"


class NoValidDataError(AnalyticsError):
    """Workbook decoded but every sheet was empty."""
    default_message = "No valid data found in Excel file"


class UnknownColumnError(AnalyticsError):
    """Chart request names a column missing from the sheet headers."""
    default_message = "Invalid axis selection"

    def __init__(self, column: str | None = None, message: str | None = None):
        self.column = column
        super().__init__(message)


class NotFoundError(AnalyticsError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"
