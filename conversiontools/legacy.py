"""v1-compatible wrapper around ``ConversionToolsClient``.

Deprecated; kept so v1 call sites keep working::

    client = ConversionClient(api_token)
    await client.run("convert.xml_to_csv", filename="data.xml",
                     output_filename="result.csv", options={"delimiter": "tab"})
"""

from __future__ import annotations

import warnings
from typing import Any, Dict, Mapping, Optional

from conversiontools.core.client import ConversionToolsClient
from conversiontools.core.errors import ConversionError, ValidationError

DEPRECATION_MESSAGE = (
    "The v1-compatible ConversionClient is deprecated. Use "
    "conversiontools.core.client.ConversionToolsClient instead; see "
    "https://conversiontools.io/api-documentation#upgrade-v1-to-v2"
)

DELIMITER_MAP = {
    "tab": "tabulation",
    "comma": "comma",
    "semicolon": "semicolon",
    "pipe": "vertical_bar",
    "vertical_bar": "vertical_bar",
}

YES_NO_KEYS = ("images", "javascript", "background")

_warning_shown = False


def _warn_deprecated() -> None:
    global _warning_shown
    if _warning_shown:
        return
    _warning_shown = True
    warnings.warn(DEPRECATION_MESSAGE, FutureWarning, stacklevel=3)


def translate_options(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Map v1 option values onto their v2 equivalents."""
    translated = dict(options or {})

    delimiter = translated.get("delimiter")
    if isinstance(delimiter, str) and delimiter in DELIMITER_MAP:
        translated["delimiter"] = DELIMITER_MAP[delimiter]

    for key in YES_NO_KEYS:
        if translated.get(key) == "yes":
            translated[key] = True
        elif translated.get(key) == "no":
            translated[key] = False

    return translated


class ConversionClient:
    """Deprecated v1 client. Prefer ``ConversionToolsClient``."""

    def __init__(self, api_token: str, **settings: Any) -> None:
        _warn_deprecated()
        self.client = ConversionToolsClient(api_token=api_token, **settings)

    async def __aenter__(self) -> "ConversionClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.client.aclose()

    async def run(
        self,
        conversion_type: str,
        *,
        filename: str | None = None,
        url: str | None = None,
        output_filename: str | None = None,
        timeout: float | None = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Convert a local file or a URL and return the result path.

        As in v1, ``timeout`` is the polling interval in seconds.
        """
        if filename:
            source: Any = filename
        elif url:
            source = {"url": url}
        else:
            raise ValidationError("Either filename or url must be provided")

        return await self.client.convert(
            conversion_type,
            source,
            output=output_filename,
            options=translate_options(options),
            polling={"interval": timeout} if timeout else None,
        )

    async def check_status(
        self,
        task_id: str,
        *,
        filename: str | None = None,
        timeout: float | None = None,
    ) -> str:
        """Wait for an existing task and download its result."""
        task = await self.client.get_task(task_id)
        if task.is_running:
            await task.wait(interval=timeout or 5.0)
        if task.is_error:
            raise ConversionError(task.error or "Conversion failed", task.id, task.error)
        return await task.download_to(filename)
