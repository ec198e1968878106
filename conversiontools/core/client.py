"""High level Conversion Tools client."""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional

import httpx

from conversiontools.core.config_api import ConfigAPI
from conversiontools.core.conversions import unknown_option_keys
from conversiontools.core.files import FilesAPI
from conversiontools.core.http import HttpClient
from conversiontools.core.models import (
    ApiConfig,
    ConversionProgressEvent,
    RateLimits,
    TaskStatus,
    TaskStatusResponse,
    UserInfo,
)
from conversiontools.core.polling import PollingOptions, setting_or
from conversiontools.core.settings import ClientConfig
from conversiontools.core.task import Task
from conversiontools.core.tasks import TasksAPI
from conversiontools.core.validation import (
    normalize_input,
    validate_api_token,
    validate_conversion_type,
)

logger = logging.getLogger(__name__)


class ConversionToolsClient:
    """Upload, convert and download files with the Conversion Tools API.

    Accepts either a ready ``ClientConfig`` or the same fields as keyword
    arguments::

        async with ConversionToolsClient(api_token="...") as client:
            await client.convert("convert.xml_to_csv", "data.xml", output="data.csv")
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        **settings: Any,
    ) -> None:
        if config is None:
            config = ClientConfig(api_token=settings.pop("api_token", ""), **settings)
        elif settings:
            config = replace(config, **settings)
        validate_api_token(config.api_token)
        self.config = config

        self.http = HttpClient(
            api_token=config.api_token,
            base_url=config.base_url,
            timeout=config.timeout,
            retries=config.retries,
            retry_delay=config.retry_delay,
            retryable_statuses=config.retryable_statuses,
            user_agent=config.user_agent,
            transport=transport,
        )
        self.files = FilesAPI(self.http)
        self.tasks = TasksAPI(self.http)
        self._config_api = ConfigAPI(self.http)

    async def __aenter__(self) -> "ConversionToolsClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http.aclose()

    def _polling(self, overrides: Optional[Mapping[str, float]] = None) -> PollingOptions:
        overrides = overrides or {}
        return PollingOptions(
            interval=setting_or(overrides.get("interval"), self.config.polling_interval),
            max_interval=setting_or(
                overrides.get("max_interval"), self.config.max_polling_interval
            ),
            backoff=setting_or(overrides.get("backoff"), self.config.polling_backoff),
            timeout=overrides.get("timeout"),
        )

    async def convert(
        self,
        conversion_type: str,
        input: Any,
        *,
        output: str | os.PathLike[str] | None = None,
        options: Optional[Mapping[str, Any]] = None,
        wait: bool = True,
        callback_url: str | None = None,
        polling: Optional[Mapping[str, float]] = None,
    ) -> str:
        """Run a whole conversion: upload, create task, wait and download.

        ``input`` is a local path, or a mapping with one of ``path``, ``url``,
        ``stream``, ``buffer`` (plus optional ``filename``) or ``file_id``.
        URL and file id inputs skip the upload. ``polling`` may override
        ``interval``, ``max_interval``, ``backoff`` and ``timeout``.

        Returns the downloaded file path, or the task id when ``wait`` is False.
        """
        validate_conversion_type(conversion_type)
        source = normalize_input(input)
        task_options: Dict[str, Any] = dict(options or {})

        if source.kind == "file_id":
            task_options["file_id"] = source.value
        elif source.kind == "url":
            task_options["url"] = source.value
        else:
            task_options["file_id"] = await self.files.upload(
                source.value,
                filename=source.filename,
                on_progress=self.config.on_upload_progress,
            )

        unknown = unknown_option_keys(conversion_type, task_options)
        if unknown:
            logger.debug(f"Options not listed for {conversion_type}: {', '.join(unknown)}")

        task = await self.create_task(
            conversion_type,
            task_options,
            callback_url=callback_url or self.config.webhook_url,
            polling=polling,
        )
        if not wait:
            return task.id

        def report(status: TaskStatusResponse) -> None:
            if self.config.on_conversion_progress is None:
                return
            self.config.on_conversion_progress(
                ConversionProgressEvent(
                    loaded=status.conversion_progress,
                    total=100,
                    percent=status.conversion_progress,
                    status=status.status,
                    task_id=task.id,
                )
            )

        await task.wait(on_progress=report)
        return await task.download_to(output, self.config.on_download_progress)

    async def create_task(
        self,
        conversion_type: str,
        options: Mapping[str, Any],
        *,
        callback_url: str | None = None,
        polling: Optional[Mapping[str, float]] = None,
    ) -> Task:
        """Create a task without uploading or waiting."""
        result = await self.tasks.create(conversion_type, dict(options), callback_url)
        if result.sandbox:
            logger.info(f"Task {result.task_id} runs in sandbox mode")
        return Task(
            result.task_id,
            conversion_type,
            self.tasks,
            self.files,
            status=TaskStatus.PENDING,
            polling=self._polling(polling),
        )

    async def get_task(self, task_id: str) -> Task:
        """Fetch an existing task. Its conversion type is not known to the API."""
        status = await self.tasks.get_status(task_id)
        return Task(
            task_id,
            "",
            self.tasks,
            self.files,
            status=status.status,
            file_id=status.file_id,
            error=status.error,
            conversion_progress=status.conversion_progress,
            polling=self._polling(),
        )

    def get_rate_limits(self) -> RateLimits | None:
        return self.http.get_rate_limits()

    async def get_user(self) -> UserInfo:
        return await self._config_api.get_user_info()

    async def get_config(self) -> ApiConfig:
        return await self._config_api.get_config()
