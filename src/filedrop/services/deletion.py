"""Removal of stored files together with their thumbnails."""

import logging

from src.filedrop.core.constants import (
    ERROR_DELETE_FAILED,
    ERROR_FILE_NOT_FOUND,
    ERROR_INVALID_FILENAME,
)
from src.filedrop.core.exceptions import BadRequestError, StorageError, StoredFileNotFoundError
from src.filedrop.core.paths import PathKind, PathResolver, is_sanitized

logger = logging.getLogger(__name__)


def delete_stored_file(paths: PathResolver, filename: str) -> None:
    """Delete a stored file; its thumbnail is removed on a best-effort basis."""
    if not is_sanitized(filename):
        raise BadRequestError(ERROR_INVALID_FILENAME)

    try:
        paths.resolve(filename).unlink()
    except FileNotFoundError as err:
        raise StoredFileNotFoundError(ERROR_FILE_NOT_FOUND) from err
    except OSError as err:
        logger.error("Failed to delete %s: %s", filename, err)
        raise StorageError(ERROR_DELETE_FAILED) from err

    try:
        paths.resolve(filename, PathKind.THUMBNAIL).unlink()
    except FileNotFoundError:
        logger.debug("No thumbnail to delete for %s", filename)
    except OSError as err:
        logger.warning("Failed to delete thumbnail of %s: %s", filename, err)

    logger.info("Deleted %s", filename)
