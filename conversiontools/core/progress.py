"""Progress tracking helpers for uploads and downloads."""

from __future__ import annotations

import io
import os
from typing import BinaryIO, Callable, Optional

from conversiontools.core.models import ProgressEvent

ProgressCallback = Callable[[ProgressEvent], None]


def calculate_percent(loaded: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(loaded / total * 100)


def create_progress_event(loaded: int, total: Optional[int] = None) -> ProgressEvent:
    event = ProgressEvent(loaded=loaded, total=total)
    if total and total > 0:
        event.percent = calculate_percent(loaded, total)
    return event


class ProgressReader:
    """File-like wrapper that reports cumulative bytes read.

    Positions are relative to where ``raw`` stood when wrapped, so a stream
    handed over mid-file uploads only its remaining bytes. Seeking back to
    that start resets the counter so a retried upload reports from zero again.
    """

    def __init__(
        self,
        raw: BinaryIO,
        on_progress: Optional[ProgressCallback] = None,
        total: Optional[int] = None,
    ) -> None:
        self._raw = raw
        self._on_progress = on_progress
        self.total = total
        self.loaded = 0
        self._start = _position(raw)

    def read(self, size: int = -1) -> bytes:
        chunk = self._raw.read(size)
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        if chunk:
            self.loaded += len(chunk)
            if self._on_progress is not None:
                self._on_progress(create_progress_event(self.loaded, self.total))
        return chunk

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        if not hasattr(self._raw, "seek"):
            raise io.UnsupportedOperation("underlying stream is not seekable")
        if whence == os.SEEK_SET:
            position = self._raw.seek(self._start + offset) - self._start
            if offset == 0:
                self.loaded = 0
            return position
        return self._raw.seek(offset, whence) - self._start

    def tell(self) -> int:
        if not hasattr(self._raw, "tell"):
            raise io.UnsupportedOperation("underlying stream is not seekable")
        return self._raw.tell() - self._start

    def close(self) -> None:
        self._raw.close()


def _position(raw: BinaryIO) -> int:
    try:
        return raw.tell()
    except (AttributeError, OSError):
        return 0


def stream_size(stream: BinaryIO) -> Optional[int]:
    """Return the remaining byte count of a seekable stream, or None."""
    try:
        offset = stream.tell()
        end = stream.seek(0, os.SEEK_END)
        stream.seek(offset)
    except (AttributeError, OSError, io.UnsupportedOperation):
        return None
    return end - offset
