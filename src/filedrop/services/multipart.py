"""Incremental multipart/form-data parsing.

The request body is fed chunk by chunk into python-multipart's push parser;
its callbacks are turned into an ordered stream of part events, so part
content can be consumed while the body is still arriving.
"""

from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from src.filedrop.core.constants import ERROR_MALFORMED_MULTIPART, ERROR_NOT_MULTIPART
from src.filedrop.core.exceptions import BadRequestError

MULTIPART_FORM_DATA = b"multipart/form-data"


@dataclass(frozen=True)
class PartStart:
    """Headers of a part have been read."""

    name: str
    filename: str | None = None


@dataclass(frozen=True)
class PartData:
    """A slice of the current part's body."""

    data: bytes


@dataclass(frozen=True)
class PartEnd:
    """The current part is complete."""


MultipartEvent = PartStart | PartData | PartEnd


def _decode(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


class _EventCollector:
    """Parser callbacks buffering events until the next read."""

    def __init__(self) -> None:
        self.events: list[MultipartEvent] = []
        self._headers: dict[bytes, bytes] = {}
        self._field = b""
        self._value = b""

    def callbacks(self) -> dict:
        return {
            "on_part_begin": self.on_part_begin,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_headers_finished": self.on_headers_finished,
        }

    def drain(self) -> list[MultipartEvent]:
        events, self.events = self.events, []
        return events

    def on_part_begin(self) -> None:
        self._headers = {}

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._field += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._value += data[start:end]

    def on_header_end(self) -> None:
        self._headers[self._field.lower()] = self._value
        self._field = b""
        self._value = b""

    def on_headers_finished(self) -> None:
        _, options = parse_options_header(self._headers.get(b"content-disposition", b""))
        filename = options.get(b"filename")
        self.events.append(
            PartStart(
                name=_decode(options.get(b"name", b"")),
                filename=None if filename is None else _decode(filename),
            ),
        )

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        self.events.append(PartData(bytes(data[start:end])))

    def on_part_end(self) -> None:
        self.events.append(PartEnd())


async def iter_multipart(
    content_type: str | None,
    chunks: AsyncIterable[bytes],
) -> AsyncIterator[MultipartEvent]:
    """Yield part events of a multipart body as its chunks arrive."""
    media_type, params = parse_options_header(content_type or "")
    boundary = params.get(b"boundary")
    if media_type != MULTIPART_FORM_DATA or not boundary:
        raise BadRequestError(ERROR_NOT_MULTIPART)

    collector = _EventCollector()
    parser = MultipartParser(boundary, collector.callbacks())

    try:
        async for chunk in chunks:
            if not chunk:
                continue
            parser.write(chunk)
            for event in collector.drain():
                yield event
        parser.finalize()
    except MultipartParseError as err:
        raise BadRequestError(ERROR_MALFORMED_MULTIPART) from err

    for event in collector.drain():
        yield event
