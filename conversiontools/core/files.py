"""Upload and download files through the Conversion Tools API."""

from __future__ import annotations

import io
import logging
import os
import re
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Optional, Union
from urllib.parse import quote, unquote

import httpx

from conversiontools.core.errors import ValidationError
from conversiontools.core.http import HttpClient
from conversiontools.core.models import FileInfo
from conversiontools.core.progress import (
    ProgressCallback,
    ProgressReader,
    create_progress_event,
    stream_size,
)
from conversiontools.core.validation import validate_file_id

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_NAME = "file"
DEFAULT_RESULT_NAME = "result"

UploadSource = Union[str, "os.PathLike[str]", bytes, bytearray, BinaryIO]

_FILENAME_STAR_RE = re.compile(r"filename\*\s*=\s*([^;]+)", re.IGNORECASE)
_FILENAME_RE = re.compile(r"filename\s*=\s*(\"[^\"]*\"|'[^']*'|[^;\n]*)", re.IGNORECASE)


def filename_from_disposition(disposition: Optional[str]) -> Optional[str]:
    """Extract a bare file name from a Content-Disposition header value."""
    if not disposition:
        return None
    name = None
    match = _FILENAME_STAR_RE.search(disposition)
    if match:
        value = match.group(1).strip().strip("\"'")
        if "''" in value:
            value = value.split("''", 1)[1]
        name = unquote(value)
    else:
        match = _FILENAME_RE.search(disposition)
        if match:
            name = match.group(1).strip().strip("\"'")
    if not name:
        return None
    # Never let a server-supplied name escape the working directory.
    name = Path(name.replace("\\", "/")).name
    return name or None


class FilesAPI:
    """Upload, inspect and download files."""

    def __init__(self, http: HttpClient) -> None:
        self.http = http

    async def upload(
        self,
        source: UploadSource,
        *,
        filename: str | None = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Upload a path, byte buffer or binary stream and return its file id."""
        close_after = False
        if isinstance(source, (str, os.PathLike)):
            path = Path(source)
            if not path.exists():
                raise ValidationError(f"File not found: {path}")
            if not path.is_file():
                raise ValidationError(f"Not a file: {path}")
            stream: BinaryIO = path.open("rb")
            close_after = True
            filename = filename or path.name
            total: Optional[int] = path.stat().st_size
        elif isinstance(source, (bytes, bytearray)):
            stream = io.BytesIO(bytes(source))
            total = len(source)
        elif hasattr(source, "read"):
            stream = source
            total = stream_size(source)
            filename = filename or _stream_name(source)
        else:
            raise ValidationError(
                "Upload source must be a file path, bytes or a binary file-like object"
            )

        reader = ProgressReader(stream, on_progress, total)
        try:
            response = await self.http.post(
                "/files",
                files={"file": (filename or DEFAULT_UPLOAD_NAME, reader)},
            )
        finally:
            if close_after:
                stream.close()

        file_id = response.get("file_id")
        if not file_id:
            raise ValidationError("Upload response did not contain a file id", response)
        logger.info(f"Uploaded {filename or DEFAULT_UPLOAD_NAME} as {file_id}")
        return str(file_id)

    async def get_info(self, file_id: str) -> FileInfo:
        validate_file_id(file_id)
        payload = await self.http.get(f"/files/{quote(file_id)}/info")
        return FileInfo.from_payload(payload)

    async def _open_download(self, file_id: str) -> httpx.Response:
        validate_file_id(file_id)
        return await self.http.get(f"/files/{quote(file_id)}", raw=True)

    async def download_stream(self, file_id: str) -> AsyncIterator[bytes]:
        """Open a download and return an iterator over its body chunks.

        The request is sent (and the id validated) before this returns.
        """
        response = await self._open_download(file_id)

        async def chunks() -> AsyncIterator[bytes]:
            try:
                with self.http.transport_errors():
                    async for chunk in response.aiter_bytes():
                        yield chunk
            finally:
                await response.aclose()

        return chunks()

    async def download_bytes(self, file_id: str) -> bytes:
        response = await self._open_download(file_id)
        try:
            with self.http.transport_errors():
                return await response.aread()
        finally:
            await response.aclose()

    async def download_to(
        self,
        file_id: str,
        output_path: str | os.PathLike[str] | None = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Stream a file to disk and return the path written.

        Without ``output_path`` the name comes from the Content-Disposition
        header, falling back to ``result`` in the working directory.
        """
        response = await self._open_download(file_id)
        try:
            if output_path is not None:
                destination = os.fspath(output_path)
            else:
                destination = (
                    filename_from_disposition(response.headers.get("content-disposition"))
                    or DEFAULT_RESULT_NAME
                )
            Path(destination).parent.mkdir(parents=True, exist_ok=True)

            total = _content_length(response)
            loaded = 0
            try:
                with open(destination, "wb") as handle, self.http.transport_errors():
                    async for chunk in response.aiter_bytes():
                        handle.write(chunk)
                        loaded += len(chunk)
                        if on_progress is not None and total:
                            on_progress(create_progress_event(loaded, total))
            except BaseException:
                # Never leave a truncated result behind.
                Path(destination).unlink(missing_ok=True)
                raise
        finally:
            await response.aclose()

        logger.info(f"Downloaded {file_id} to {destination}")
        return destination


def _stream_name(stream: object) -> Optional[str]:
    name = getattr(stream, "name", None)
    if isinstance(name, str) and name:
        return os.path.basename(name)
    return None


def _content_length(response: httpx.Response) -> Optional[int]:
    value = response.headers.get("content-length")
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None
