from typing import Optional


class ShipperError(Exception):
    """Base class for faults that fail a single invocation but never the host."""


class ConfigurationError(ShipperError):
    """Required settings (API token, ingestion URL) are missing or invalid."""


class MissingRecordsError(ShipperError):
    """A record slot in the batch is present but empty."""

    def __init__(self, message: str = 'JSON blob does not have log records. Skip processing the blob.'):
        super().__init__(message)


class IngestionError(ShipperError):
    """The ingestion endpoint rejected a record or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
