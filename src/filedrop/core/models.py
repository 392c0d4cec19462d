"""Pydantic models for data validation."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class UploadOptions(BaseModel):
    """Options part of an upload request."""

    # Only JSON booleans count; anything else falls back to the defaults
    model_config = ConfigDict(populate_by_name=True, strict=True)

    use_original_filename: bool = Field(
        default=False,
        alias="useOriginalFilename",
        description="Store under the sanitized original filename",
    )
    redirect: bool = Field(default=True, description="Answer with a redirect")

    @classmethod
    def parse_lenient(cls, raw: bytes | str) -> "UploadOptions":
        """Parse an options payload, falling back to defaults on any error."""
        try:
            return cls.model_validate_json(raw)
        except ValidationError:
            return cls()


class UploadResponse(BaseModel):
    """Response model for file upload."""

    url: str = Field(description="Public URL of the stored file")


class UploadResult(BaseModel):
    """Outcome of an ingested upload."""

    url: str = Field(description="Public URL of the stored file")
    filename: str = Field(description="Final stored filename")
    redirect: bool = Field(description="Whether the client asked for a redirect")


class PageKind(StrEnum):
    """Kinds of pagination nodes."""

    ELLIPSIS = "ellipsis"
    CURRENT = "current"
    PAGE = "page"


class PageNode(BaseModel):
    """Single node of a pagination bar."""

    kind: PageKind = Field(description="Node kind")
    number: int | None = Field(default=None, description="1-indexed page label")

    @classmethod
    def ellipsis(cls) -> "PageNode":
        return cls(kind=PageKind.ELLIPSIS)

    @classmethod
    def current(cls, number: int) -> "PageNode":
        return cls(kind=PageKind.CURRENT, number=number)

    @classmethod
    def page(cls, number: int) -> "PageNode":
        return cls(kind=PageKind.PAGE, number=number)

    @property
    def index(self) -> int | None:
        """Zero-based page index for links."""
        return None if self.number is None else self.number - 1


class PaginationBar(BaseModel):
    """Navigation structure around the current page.

    ``prev`` and ``next`` are zero-based page indices, usable as the ``page``
    query parameter. Node numbers are 1-indexed labels.
    """

    prev: int | None = Field(default=None, description="Previous page index")
    next: int | None = Field(default=None, description="Next page index")
    pages: list[PageNode] = Field(default_factory=list, description="Page nodes")


class SortKey(StrEnum):
    """Listing sort orders."""

    DATE = "date"
    SIZE = "size"


class RecentEntry(BaseModel):
    """Stored file as rendered in a listing."""

    filename: str = Field(description="Stored filename")
    url: str = Field(description="URL relative to the server root")
    thumbnail_url: str = Field(description="Thumbnail or placeholder URL")
    timestamp: str = Field(description="Formatted modification time")
    size: int = Field(description="File size in bytes")


class RecentPage(BaseModel):
    """One page of the stored file listing."""

    entries: list[RecentEntry] = Field(description="Entries on this page")
    pagination: PaginationBar = Field(description="Page navigation")
    total: int = Field(description="Number of entries matching the filter")
    page: int = Field(description="Zero-based page index")
    sort: SortKey = Field(description="Sort order")
    year: int | None = Field(default=None, description="Year filter")
    month: int | None = Field(default=None, description="Month filter")


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str = Field(description="Error message")
    status_code: int = Field(description="HTTP status code")


class HealthCheck(BaseModel):
    """Health check response model."""

    status: str = Field(description="Service status")
    timestamp: datetime = Field(description="Check timestamp")
    version: str = Field(description="API version")
    storage_writable: bool = Field(description="Storage directory status")
