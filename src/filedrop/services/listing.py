"""Listing of stored files by date or size."""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from src.filedrop.core.constants import ERROR_LISTING_FAILED, TIMESTAMP_FORMAT
from src.filedrop.core.exceptions import StorageError
from src.filedrop.core.models import RecentEntry, RecentPage, SortKey
from src.filedrop.core.paths import PathResolver
from src.filedrop.core.thumbnails import thumbnail_url
from src.filedrop.services.pagination import build_pagination

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryEntry:
    """Regular file found while walking the storage root."""

    path: Path
    modified: float
    size: int

    @property
    def modified_at(self) -> datetime:
        return datetime.fromtimestamp(self.modified)


@dataclass(frozen=True)
class DateFilter:
    """Restricts entries to all time, a year, or a year and month."""

    year: int | None = None
    month: int | None = None

    def matches(self, entry: DirectoryEntry) -> bool:
        if self.year is None:
            return True
        modified_at = entry.modified_at
        if modified_at.year != self.year:
            return False
        return self.month is None or modified_at.month == self.month


def walk_storage(root: Path, skip: Path | None = None) -> list[DirectoryEntry]:
    """Collect every regular file below ``root``, leaving out the ``skip`` tree.

    Raises OSError on any unreadable directory or entry.
    """
    entries: list[DirectoryEntry] = []
    pending = [root]
    while pending:
        directory = pending.pop()
        with os.scandir(directory) as it:
            for item in it:
                path = Path(item.path)
                if item.is_dir(follow_symlinks=False):
                    if path != skip:
                        pending.append(path)
                elif item.is_file():
                    stat = item.stat()
                    entries.append(DirectoryEntry(path, stat.st_mtime, stat.st_size))
    return entries


class RecentListingEngine:
    """Builds filtered, sorted and paginated views of the stored files."""

    def __init__(self, paths: PathResolver, page_size: int) -> None:
        self.paths = paths
        self.page_size = page_size

    def collect(self) -> list[DirectoryEntry]:
        """Walk the storage root fresh, skipping thumbnails."""
        root = self.paths.directory()
        try:
            return walk_storage(root, skip=self.paths.thumbnail_dir)
        except OSError as err:
            logger.error("Failed to walk %s: %s", root, err)
            raise StorageError(ERROR_LISTING_FAILED) from err

    def list_page(
        self,
        date_filter: DateFilter | None = None,
        sort: SortKey = SortKey.DATE,
        page: int = 0,
    ) -> RecentPage:
        """Return zero-based page ``page`` of the matching entries."""
        date_filter = date_filter or DateFilter()
        matching = [entry for entry in self.collect() if date_filter.matches(entry)]

        if sort is SortKey.SIZE:
            matching.sort(key=lambda entry: entry.size, reverse=True)
        else:
            matching.sort(key=lambda entry: entry.modified, reverse=True)

        start = page * self.page_size
        window = matching[start : start + self.page_size]

        return RecentPage(
            entries=[self._render(entry) for entry in window],
            pagination=build_pagination(len(matching), self.page_size, page),
            total=len(matching),
            page=page,
            sort=sort,
            year=date_filter.year,
            month=date_filter.month,
        )

    def _render(self, entry: DirectoryEntry) -> RecentEntry:
        return RecentEntry(
            filename=entry.path.name,
            url=self.paths.relative_url(entry.path),
            thumbnail_url=thumbnail_url(self.paths, entry.path.name),
            timestamp=entry.modified_at.strftime(TIMESTAMP_FORMAT),
            size=entry.size,
        )
