"""Exceptions raised by the storage core."""

from src.filedrop.core.constants import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


class FileDropError(Exception):
    """Base class for errors reported to the caller."""

    status_code = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        """Initialize error with a client-facing message."""
        self.detail = detail
        super().__init__(detail)


class BadRequestError(FileDropError):
    """Raised for missing or malformed request parts."""

    status_code = HTTP_400_BAD_REQUEST


class EmptyUploadError(FileDropError):
    """Raised when the uploaded file part carries no bytes."""

    status_code = HTTP_400_BAD_REQUEST


class StoredFileNotFoundError(FileDropError):
    """Raised when a stored file does not exist."""

    status_code = HTTP_404_NOT_FOUND


class StorageError(FileDropError):
    """Raised when a filesystem operation fails."""


class ThumbnailError(FileDropError):
    """Raised when a decoded image cannot be written as a thumbnail.

    Never leaves the thumbnail worker.
    """
