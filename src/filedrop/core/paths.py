"""Filename sanitization and storage path resolution."""

import re
import unicodedata
from enum import Enum
from pathlib import Path
from urllib.parse import quote

from src.filedrop.core.constants import FALLBACK_FILENAME, THUMBNAIL_DIR_NAME

# Separators, characters reserved on common filesystems, and control characters
_RESERVED_CHARS = re.compile(r'[/\\:*?"<>|\x00-\x1f\x7f]')
_WINDOWS_DEVICE_NAMES = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE)


class PathKind(Enum):
    """Storage areas below the base directory."""

    DATA = "data"
    THUMBNAIL = "thumbnail"


def basename(name: str) -> str:
    """Last path component of ``name``, treating both slashes as separators."""
    return name.replace("\\", "/").rsplit("/", 1)[-1]


def clean_component(name: str) -> str:
    """Strip reserved characters from a single path component.

    Unicode letters are kept. Whitespace runs become underscores, leading
    dots and trailing dots are removed. The result may be empty.
    """
    cleaned = _RESERVED_CHARS.sub("", unicodedata.normalize("NFC", name))
    cleaned = "_".join(cleaned.split())
    return cleaned.lstrip(".").rstrip(".")


def sanitize(name: str) -> str:
    """Reduce a user supplied filename to a safe single path component.

    Directory components are dropped and reserved characters removed. Names
    that sanitize to nothing get a fixed fallback.
    """
    safe = clean_component(basename(name))
    if not safe:
        return FALLBACK_FILENAME
    if _WINDOWS_DEVICE_NAMES.match(safe):
        return f"_{safe}"
    return safe


def is_sanitized(name: str) -> bool:
    """Check that a name is already in sanitized form."""
    return bool(name) and sanitize(name) == name


class PathResolver:
    """Resolves stored filenames to locations under the base directory."""

    def __init__(self, base_dir: Path | str) -> None:
        self.base_dir = Path(base_dir)

    @property
    def thumbnail_dir(self) -> Path:
        return self.base_dir / THUMBNAIL_DIR_NAME

    def directory(self, kind: PathKind = PathKind.DATA) -> Path:
        """Return the directory for ``kind``, creating it if absent."""
        directory = self.thumbnail_dir if kind is PathKind.THUMBNAIL else self.base_dir
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def resolve(self, name: str, kind: PathKind = PathKind.DATA) -> Path:
        """Join the sanitized ``name`` under the directory for ``kind``."""
        return self.directory(kind) / sanitize(name)

    def ensure_directories(self) -> None:
        self.directory(PathKind.DATA)
        self.directory(PathKind.THUMBNAIL)

    def relative_url(self, path: Path) -> str:
        """Strip the storage root from ``path`` and escape it as a URL path."""
        relative = Path(path).relative_to(self.base_dir).as_posix()
        return "/" + quote(relative)
