"""Thumbnail generation and lookup."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from urllib.parse import quote

from PIL import Image as PILImage
from PIL import ImageOps, UnidentifiedImageError

from src.filedrop.core.constants import (
    DEFAULT_THUMBNAIL_SIZE,
    JPEG_FORMAT,
    PLACEHOLDER_THUMBNAIL_URL,
    RGB_MODE,
    THUMBNAIL_URL_PREFIX,
)
from src.filedrop.core.exceptions import ThumbnailError
from src.filedrop.core.paths import PathKind, PathResolver

logger = logging.getLogger(__name__)


def _open_image(source: Path) -> PILImage.Image | None:
    """Decode ``source`` fully, or return None if it is not an image."""
    try:
        img = PILImage.open(source)
    except (UnidentifiedImageError, PILImage.DecompressionBombError, OSError, ValueError):
        return None
    try:
        img.load()
    except (PILImage.DecompressionBombError, OSError, SyntaxError, ValueError):
        img.close()
        return None
    return img


def create_thumbnail(
    source: Path,
    dest: Path,
    size: int = DEFAULT_THUMBNAIL_SIZE,
) -> bool:
    """Create a center-cropped square thumbnail of ``source`` at ``dest``.

    Returns False when ``source`` is not a decodable image. Raises
    ThumbnailError when the thumbnail cannot be written.
    """
    img = _open_image(source)
    if img is None:
        return False

    with img:
        thumb_format = PILImage.registered_extensions().get(dest.suffix.lower()) or img.format
        thumb = ImageOps.fit(img, (size, size), method=PILImage.Resampling.BILINEAR)
        # JPEG has no alpha or palette modes
        if thumb_format == JPEG_FORMAT and thumb.mode != RGB_MODE:
            thumb = thumb.convert(RGB_MODE)
        try:
            thumb.save(dest, thumb_format)
        except (OSError, ValueError, KeyError) as err:
            msg = f"Could not write thumbnail {dest}: {err}"
            raise ThumbnailError(msg) from err

    return True


def thumbnail_url(paths: PathResolver, filename: str) -> str:
    """Return the thumbnail URL of a stored file, or the placeholder."""
    if paths.resolve(filename, PathKind.THUMBNAIL).is_file():
        return THUMBNAIL_URL_PREFIX + quote(filename)
    return PLACEHOLDER_THUMBNAIL_URL


class ThumbnailWorker:
    """Background pool generating thumbnails detached from requests."""

    def __init__(
        self,
        size: int = DEFAULT_THUMBNAIL_SIZE,
        max_workers: int = 2,
    ) -> None:
        self.size = size
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="thumbnail",
        )

    def submit(self, source: Path, dest: Path) -> Future[bool]:
        """Schedule thumbnail generation; the result is only logged."""
        future = self._executor.submit(create_thumbnail, source, dest, self.size)
        future.add_done_callback(lambda done: self._report(source, done))
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    @staticmethod
    def _report(source: Path, future: Future[bool]) -> None:
        err = future.exception()
        if err is not None:
            logger.error("Thumbnail generation failed for %s: %s", source, err)
        elif future.result():
            logger.debug("Created thumbnail for %s", source)
        else:
            logger.debug("Skipped thumbnail for non-image %s", source)
