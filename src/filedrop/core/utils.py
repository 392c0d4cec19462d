"""Utility functions for stored filenames and links."""

import secrets
import string
from pathlib import Path
from urllib.parse import quote, urljoin

from src.filedrop.core.constants import RANDOM_FILENAME_LENGTH
from src.filedrop.core.paths import basename, clean_component

ALPHANUMERIC = string.ascii_letters + string.digits


def generate_random_filename(extension: str | None = None) -> str:
    """Generate a random alphanumeric filename, keeping ``extension`` if given."""
    token = "".join(secrets.choice(ALPHANUMERIC) for _ in range(RANDOM_FILENAME_LENGTH))
    if extension:
        return f"{token}.{extension}"
    return token


def get_extension(filename: str) -> str | None:
    """Return the cleaned final extension of a declared filename, without the dot."""
    suffix = Path(basename(filename)).suffix
    return clean_component(suffix[1:]) or None


def public_url(server_url: str, filename: str) -> str:
    """Resolve ``filename`` against the external base URL."""
    return urljoin(server_url, quote(filename))
