"""Input validation and normalization helpers."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

from conversiontools.core.errors import ValidationError

CONVERSION_TYPE_PREFIX = "convert."

_ID_RE = re.compile(r"^[a-f0-9]{32}$", re.IGNORECASE)


@dataclass
class NormalizedInput:
    """Conversion input reduced to one of path, url, stream, buffer or file_id."""

    kind: str
    value: Any
    filename: Optional[str] = None


def validate_api_token(token: object) -> None:
    if not token or not isinstance(token, str):
        raise ValidationError("API token is required and must be a string")
    if not token.strip():
        raise ValidationError("API token cannot be empty")


def validate_conversion_type(conversion_type: object) -> None:
    """Require a type of the form ``convert.source_to_target``."""
    if not conversion_type or not isinstance(conversion_type, str):
        raise ValidationError("Conversion type is required and must be a string")
    if not conversion_type.startswith(CONVERSION_TYPE_PREFIX):
        raise ValidationError(
            f'Invalid conversion type format: "{conversion_type}". '
            'Expected format: "convert.source_to_target"'
        )


def _validate_id(value: object, label: str) -> None:
    if not value or not isinstance(value, str):
        raise ValidationError(f"{label} is required and must be a string")
    if not _ID_RE.match(value):
        raise ValidationError(
            f'Invalid {label.lower()} format: "{value}". Expected 32-character hexadecimal string'
        )


def validate_file_id(file_id: object) -> None:
    _validate_id(file_id, "File ID")


def validate_task_id(task_id: object) -> None:
    _validate_id(task_id, "Task ID")


def is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def normalize_input(source: Any) -> NormalizedInput:
    """Classify a conversion input.

    A plain string or path-like object is a local file path. Mappings may carry
    one of ``path``, ``url``, ``stream``, ``buffer`` (with an optional
    ``filename``) or ``file_id`` (also accepted as ``fileId``).
    """
    if source is None or source == "":
        raise ValidationError("Input is required")

    if isinstance(source, (str, os.PathLike)):
        return NormalizedInput("path", os.fspath(source))

    if isinstance(source, Mapping):
        path = source.get("path")
        if isinstance(path, (str, os.PathLike)):
            return NormalizedInput("path", os.fspath(path))

        url = source.get("url")
        if isinstance(url, str):
            if not is_valid_url(url):
                raise ValidationError(f"Invalid URL: {url}")
            return NormalizedInput("url", url)

        stream = source.get("stream")
        if stream is not None:
            return NormalizedInput("stream", stream, source.get("filename"))

        buffer = source.get("buffer")
        if isinstance(buffer, (bytes, bytearray)):
            return NormalizedInput("buffer", bytes(buffer), source.get("filename"))

        file_id = source.get("file_id", source.get("fileId"))
        if isinstance(file_id, str):
            return NormalizedInput("file_id", file_id)

    raise ValidationError(
        "Invalid input format. Expected: path, {'path'}, {'url'}, {'stream'}, "
        "{'buffer'} or {'file_id'}"
    )
