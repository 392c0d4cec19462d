"""Multipart upload ingestion."""

import logging
import os
from collections.abc import AsyncIterable
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from starlette.concurrency import run_in_threadpool

from src.filedrop.core.constants import (
    ERROR_DUPLICATE_FILE,
    ERROR_EMPTY_UPLOAD,
    ERROR_FILE_NOT_UPLOAD,
    ERROR_MISSING_FILE,
    ERROR_UPLOAD_FAILED,
)
from src.filedrop.core.exceptions import BadRequestError, EmptyUploadError, StorageError
from src.filedrop.core.models import UploadOptions, UploadResult
from src.filedrop.core.paths import PathKind, PathResolver, sanitize
from src.filedrop.core.thumbnails import ThumbnailWorker
from src.filedrop.core.utils import generate_random_filename, get_extension, public_url
from src.filedrop.services.multipart import MultipartEvent, PartData, PartEnd, PartStart

logger = logging.getLogger(__name__)

FILE_FIELD = "file"
OPTIONS_FIELD = "options"


@dataclass
class ReceivedFile:
    """File part written to disk under its random name."""

    original_filename: str
    random_filename: str
    path: Path
    size: int = 0


class UploadIngestor:
    """Writes an uploaded file part to storage and derives its public URL."""

    def __init__(
        self,
        paths: PathResolver,
        thumbnails: ThumbnailWorker,
        server_url: str,
    ) -> None:
        self.paths = paths
        self.thumbnails = thumbnails
        self.server_url = server_url

    async def ingest(self, events: AsyncIterable[MultipartEvent]) -> UploadResult:
        """Consume the ``file`` and ``options`` parts, in whatever order they come.

        File content is written as it arrives. If the stream breaks off, the
        partially written file is left behind.
        """
        received: ReceivedFile | None = None
        options: UploadOptions | None = None
        current: str | None = None
        handle: BinaryIO | None = None
        buffer = bytearray()

        try:
            async for event in events:
                if isinstance(event, PartStart):
                    current = event.name
                    if current == FILE_FIELD:
                        if event.filename is None:
                            raise BadRequestError(ERROR_FILE_NOT_UPLOAD)
                        if received is not None:
                            await run_in_threadpool(received.path.unlink, missing_ok=True)
                            raise BadRequestError(ERROR_DUPLICATE_FILE)
                        received, handle = await self._create_file(event.filename)
                    elif current == OPTIONS_FIELD:
                        buffer.clear()
                    else:
                        logger.debug("Ignoring unexpected multipart field %r", current)
                elif isinstance(event, PartData):
                    if current == FILE_FIELD and handle is not None and received is not None:
                        await self._write(handle, received, event.data)
                    elif current == OPTIONS_FIELD:
                        buffer.extend(event.data)
                elif isinstance(event, PartEnd):
                    if current == FILE_FIELD and handle is not None:
                        await run_in_threadpool(handle.close)
                        handle = None
                    elif current == OPTIONS_FIELD:
                        # Absent or unparseable options fall back to defaults
                        options = UploadOptions.parse_lenient(bytes(buffer))
                    current = None
        finally:
            if handle is not None:
                await run_in_threadpool(handle.close)

        if received is None:
            raise BadRequestError(ERROR_MISSING_FILE)

        if received.size == 0:
            await run_in_threadpool(received.path.unlink, missing_ok=True)
            raise EmptyUploadError(ERROR_EMPTY_UPLOAD)

        options = options or UploadOptions()

        final_filename = received.random_filename
        final_path = received.path
        if options.use_original_filename:
            final_filename = received.original_filename
            final_path = await self._rename(received.path, final_filename)

        url = public_url(self.server_url, final_filename)
        self._schedule_thumbnail(final_path, final_filename)

        logger.info("Stored upload %s (%d bytes)", final_filename, received.size)
        return UploadResult(url=url, filename=final_filename, redirect=options.redirect)

    async def _create_file(self, declared_filename: str) -> tuple[ReceivedFile, BinaryIO]:
        """Create a new file under a random name keeping the declared extension."""
        random_filename = generate_random_filename(get_extension(declared_filename))

        try:
            path = self.paths.resolve(random_filename)
            handle = await run_in_threadpool(open, path, "xb")
        except OSError as err:
            logger.error("Could not create %s: %s", random_filename, err)
            raise StorageError(ERROR_UPLOAD_FAILED) from err

        received = ReceivedFile(
            original_filename=sanitize(declared_filename),
            random_filename=random_filename,
            path=path,
        )
        return received, handle

    async def _write(self, handle: BinaryIO, received: ReceivedFile, data: bytes) -> None:
        try:
            await run_in_threadpool(handle.write, data)
        except OSError as err:
            logger.error("Could not write %s: %s", received.path, err)
            raise StorageError(ERROR_UPLOAD_FAILED) from err
        received.size += len(data)

    async def _rename(self, source: Path, filename: str) -> Path:
        """Move ``source`` to ``filename``, replacing any existing file."""
        try:
            dest = self.paths.resolve(filename)
            await run_in_threadpool(os.replace, source, dest)
        except OSError as err:
            logger.error("Could not rename %s to %s: %s", source, filename, err)
            raise StorageError(ERROR_UPLOAD_FAILED) from err
        return dest

    def _schedule_thumbnail(self, source: Path, filename: str) -> None:
        """Hand thumbnail generation to the worker; failures never reach the client."""
        try:
            dest = self.paths.resolve(filename, PathKind.THUMBNAIL)
            self.thumbnails.submit(source, dest)
        except (OSError, RuntimeError) as err:
            logger.error("Could not schedule thumbnail for %s: %s", filename, err)
