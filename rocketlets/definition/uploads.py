"""File upload context."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import BinaryIO


@dataclass(frozen=True)
class UploadDetails:
    name: str
    size: int
    type: str
    room_id: str
    user_id: str


@dataclass
class FileUploadContext:
    """Upload metadata paired with the stream carrying the file body.

    The context owns ``stream`` for a single upload transaction; leaving the
    ``with`` block closes it.
    """

    file: UploadDetails
    stream: BinaryIO

    def read(self) -> bytes:
        return self.stream.read()

    @property
    def closed(self) -> bool:
        return self.stream.closed

    def close(self) -> None:
        self.stream.close()

    def __enter__(self) -> FileUploadContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
