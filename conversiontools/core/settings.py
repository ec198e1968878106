"""Client configuration and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from conversiontools.core.models import ConversionProgressEvent, ProgressEvent
from conversiontools.core.retry import DEFAULT_RETRYABLE_STATUSES
from conversiontools.core.secrets import load_token

__version__ = "2.0.0"

BASE_URL = "https://api.conversiontools.io/v1"
DEFAULT_USER_AGENT = f"conversiontools-python/{__version__}"

TOKEN_ENV = "CONVERSIONTOOLS_API_TOKEN"


@dataclass
class ClientConfig:
    """Settings for ``ConversionToolsClient``. Durations are in seconds."""

    api_token: str
    base_url: str = BASE_URL
    timeout: float = 300.0
    retries: int = 3
    retry_delay: float = 1.0
    retryable_statuses: Sequence[int] = DEFAULT_RETRYABLE_STATUSES
    polling_interval: float = 5.0
    max_polling_interval: float = 30.0
    polling_backoff: float = 1.5
    webhook_url: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    on_upload_progress: Optional[Callable[[ProgressEvent], None]] = None
    on_download_progress: Optional[Callable[[ProgressEvent], None]] = None
    on_conversion_progress: Optional[Callable[[ConversionProgressEvent], None]] = None

    @classmethod
    def from_env(cls, **overrides) -> "ClientConfig":
        """Build a config from ``CONVERSIONTOOLS_*`` variables.

        The token falls back to the one saved in the keyring.
        """
        values: dict = {
            "api_token": os.getenv(TOKEN_ENV, "").strip() or load_token() or "",
        }
        if os.getenv("CONVERSIONTOOLS_BASE_URL"):
            values["base_url"] = os.environ["CONVERSIONTOOLS_BASE_URL"]
        if os.getenv("CONVERSIONTOOLS_TIMEOUT"):
            values["timeout"] = float(os.environ["CONVERSIONTOOLS_TIMEOUT"])
        if os.getenv("CONVERSIONTOOLS_RETRIES"):
            values["retries"] = int(os.environ["CONVERSIONTOOLS_RETRIES"])
        if os.getenv("CONVERSIONTOOLS_WEBHOOK_URL"):
            values["webhook_url"] = os.environ["CONVERSIONTOOLS_WEBHOOK_URL"]
        values.update(overrides)
        return cls(**values)
