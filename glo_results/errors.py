"""Error taxonomy for fetching, decoding and persisting draw results."""

from __future__ import annotations

from typing import Optional, Sequence


class IngestError(Exception):
    """Base class for failures raised by the ingestion core."""


class TransportError(IngestError):
    """The remote endpoint could not be reached or answered with an HTTP error."""


class DecodeError(IngestError):
    """The remote reply was not JSON or did not match any known schema."""


class StorageError(IngestError):
    """The database rejected a read or write."""


class BatchPersistError(StorageError):
    """Results were fetched but the trailing batch persist failed."""

    def __init__(self, message: str, results: Sequence = ()) -> None:
        super().__init__(message)
        self.results = list(results)


class ParseError(IngestError):
    """A raw document is not valid JSON."""


class RejectedError(IngestError):
    """A raw document carries a false or missing success flag."""


class SchemaError(IngestError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Missing {field} in JSON")
        self.field = field


class ReportNotFoundError(IngestError, LookupError):
    def __init__(self, draw_date: str) -> None:
        super().__init__(f"No lottery data stored for {draw_date}")
        self.draw_date = draw_date


class NoResult(Exception):
    """The remote source has no draw for the requested date.

    Not an error: callers treat it as "nothing to save" and move on.
    """

    def __init__(self, message: str = "No result", status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
