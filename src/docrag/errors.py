"""Exception hierarchy shared by the ingestion, search and upload layers."""

from __future__ import annotations


class DocragError(Exception):
    """Base class for all docrag errors."""


class ExtractionError(DocragError):
    """The source file could not be converted to text."""


class EmptyContentError(DocragError):
    """Cleaning and chunking left nothing worth embedding."""


class ApiError(DocragError):
    """The remote endpoint answered with an error status or an unusable body.

    Attributes:
        status: HTTP status code, or None when no response was received.
        code: Optional machine-readable error code from the response body.
    """

    def __init__(self, message: str, status: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.code = code


class MalformedResponseError(ApiError):
    """The response body was not JSON or did not have the expected shape."""


class DimensionMismatchError(DocragError, ValueError):
    """Two embedding vectors of different lengths were compared."""


class UploadValidationError(DocragError):
    """The upload was rejected before any processing started."""
