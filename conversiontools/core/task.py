"""Local projection of a remote conversion task."""

from __future__ import annotations

import logging
import os
from typing import AsyncIterator, Callable, Dict, Optional

from conversiontools.core.errors import ConversionError
from conversiontools.core.files import FilesAPI
from conversiontools.core.models import TaskStatus, TaskStatusResponse
from conversiontools.core.polling import PollingOptions, poll_task_status, setting_or
from conversiontools.core.progress import ProgressCallback
from conversiontools.core.tasks import TasksAPI

logger = logging.getLogger(__name__)

NO_RESULT_MESSAGE = "No result file available. Task may not be complete."


class Task:
    """A conversion task, refreshed from the server on demand.

    The local status only ever changes by re-fetching it; the task never
    advances its own state.
    """

    def __init__(
        self,
        task_id: str,
        conversion_type: str,
        tasks_api: TasksAPI,
        files_api: FilesAPI,
        *,
        status: TaskStatus = TaskStatus.PENDING,
        file_id: str | None = None,
        error: str | None = None,
        conversion_progress: int = 0,
        polling: PollingOptions | None = None,
    ) -> None:
        self.id = task_id
        self.type = conversion_type
        self._tasks = tasks_api
        self._files = files_api
        self._polling = polling or PollingOptions()
        self._status = TaskStatus.PENDING
        self._file_id: Optional[str] = None
        self._error: Optional[str] = None
        self._conversion_progress = 0
        self._apply(TaskStatusResponse(status, file_id, error, conversion_progress))

    def __repr__(self) -> str:
        return f"Task(id={self.id!r}, type={self.type!r}, status={self._status.value})"

    @property
    def status(self) -> TaskStatus:
        return self._status

    @property
    def file_id(self) -> Optional[str]:
        """Id of the result file, set once the task succeeded."""
        return self._file_id

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def conversion_progress(self) -> int:
        return self._conversion_progress

    @property
    def is_complete(self) -> bool:
        return self._status.is_complete

    @property
    def is_success(self) -> bool:
        return self._status is TaskStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self._status is TaskStatus.ERROR

    @property
    def is_running(self) -> bool:
        return self._status.is_running

    async def refresh(self) -> None:
        """Re-fetch the task status from the API."""
        await self.get_status()

    async def get_status(self) -> TaskStatusResponse:
        response = await self._tasks.get_status(self.id)
        self._apply(response)
        return response

    async def wait(
        self,
        *,
        interval: float | None = None,
        max_interval: float | None = None,
        backoff: float | None = None,
        timeout: float | None = None,
        on_progress: Optional[Callable[[TaskStatusResponse], None]] = None,
    ) -> None:
        """Poll until the task finishes.

        Raises ``ConversionError`` when the task ends in the ERROR state and
        ``RequestTimeoutError`` when ``timeout`` seconds pass first.
        """
        options = PollingOptions(
            interval=setting_or(interval, self._polling.interval),
            max_interval=setting_or(max_interval, self._polling.max_interval),
            backoff=setting_or(backoff, self._polling.backoff),
            timeout=timeout if timeout is not None else self._polling.timeout,
            on_progress=on_progress,
        )
        final = await poll_task_status(self.get_status, options)
        self._apply(final)

        if self._status is TaskStatus.ERROR:
            logger.warning(f"Task {self.id} failed: {self._error}")
            raise ConversionError(self._error or "Conversion failed", self.id, self._error)

    def _require_result(self) -> str:
        if not self._file_id:
            raise ConversionError(NO_RESULT_MESSAGE, self.id)
        return self._file_id

    async def download_stream(self) -> AsyncIterator[bytes]:
        return await self._files.download_stream(self._require_result())

    async def download_bytes(self) -> bytes:
        return await self._files.download_bytes(self._require_result())

    async def download_to(
        self,
        output_path: str | os.PathLike[str] | None = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        return await self._files.download_to(self._require_result(), output_path, on_progress)

    def _apply(self, response: TaskStatusResponse) -> None:
        status = TaskStatus(response.status)
        self._status = status
        self._conversion_progress = response.conversion_progress
        # A result file only exists on success, an error message only on failure.
        self._file_id = response.file_id if status is TaskStatus.SUCCESS else None
        self._error = response.error if status is TaskStatus.ERROR else None

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "type": self.type,
            "status": self._status.value,
            "fileId": self._file_id,
            "error": self._error,
            "conversionProgress": self._conversion_progress,
        }
