"""Create and inspect conversion tasks."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from conversiontools.core.errors import ConversionToolsError
from conversiontools.core.http import HttpClient
from conversiontools.core.models import TaskCreateResult, TaskDetail, TaskStatus, TaskStatusResponse
from conversiontools.core.validation import validate_conversion_type, validate_task_id

logger = logging.getLogger(__name__)


class TasksAPI:
    """Thin wrapper over the ``/tasks`` endpoints."""

    def __init__(self, http: HttpClient) -> None:
        self.http = http

    async def create(
        self,
        conversion_type: str,
        options: Optional[Dict[str, Any]] = None,
        callback_url: str | None = None,
    ) -> TaskCreateResult:
        """Create a conversion task and return its id."""
        validate_conversion_type(conversion_type)
        payload: Dict[str, Any] = {"type": conversion_type, "options": dict(options or {})}
        if callback_url:
            payload["callbackUrl"] = callback_url

        data = await self.http.post("/tasks", json=payload)
        task_id = data.get("task_id")
        if not task_id:
            raise ConversionToolsError("API response missing task id", "API_ERROR", response=data)
        logger.info(f"Created task {task_id} ({conversion_type})")
        return TaskCreateResult(
            task_id=str(task_id),
            sandbox=data.get("sandbox"),
            message=data.get("message"),
        )

    async def get_status(self, task_id: str) -> TaskStatusResponse:
        validate_task_id(task_id)
        # ``error`` here is the task's failure reason, not a failed request.
        data = await self.http.get(f"/tasks/{quote(task_id)}", check_error=False)
        return TaskStatusResponse.from_payload(data)

    async def list(self, status: TaskStatus | str | None = None) -> List[TaskDetail]:
        """List tasks, optionally filtered by status on the server side."""
        params = None
        if status:
            params = {"status": TaskStatus(status).value}
        data = await self.http.get("/tasks", params=params)
        return [TaskDetail.from_payload(item) for item in data.get("data") or []]
