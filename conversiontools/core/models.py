"""Shared dataclass models for Conversion Tools tasks, files and quotas."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TaskStatus(str, Enum):
    """Lifecycle state of a conversion task."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"

    @property
    def is_running(self) -> bool:
        return self in (TaskStatus.PENDING, TaskStatus.RUNNING)

    @property
    def is_complete(self) -> bool:
        return self in (TaskStatus.SUCCESS, TaskStatus.ERROR)


@dataclass
class QuotaWindow:
    """A (limit, remaining) pair for one quota period."""

    limit: int
    remaining: int


@dataclass
class RateLimits:
    """Quota snapshot parsed from the most recent API response headers."""

    daily: Optional[QuotaWindow] = None
    monthly: Optional[QuotaWindow] = None
    file_size: Optional[int] = None


@dataclass
class ProgressEvent:
    """Byte-level progress for an upload or a download."""

    loaded: int
    total: Optional[int] = None
    percent: Optional[int] = None


@dataclass
class ConversionProgressEvent(ProgressEvent):
    """Progress of a remote conversion, reported while polling."""

    status: TaskStatus = TaskStatus.PENDING
    task_id: str = ""


@dataclass
class FileInfo:
    """Metadata of an uploaded or produced file."""

    name: str
    size: int
    preview: bool = False
    preview_data: Optional[List[str]] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "FileInfo":
        return cls(
            name=str(payload.get("name", "")),
            size=int(payload.get("size") or 0),
            preview=bool(payload.get("preview", False)),
            preview_data=payload.get("previewData"),
        )


@dataclass
class TaskCreateResult:
    """Response of a task creation call."""

    task_id: str
    sandbox: Optional[bool] = None
    message: Optional[str] = None


@dataclass
class TaskStatusResponse:
    """Represents the latest status snapshot of a conversion task."""

    status: TaskStatus
    file_id: Optional[str] = None
    error: Optional[str] = None
    conversion_progress: int = 0

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TaskStatusResponse":
        return cls(
            status=TaskStatus(payload.get("status", TaskStatus.PENDING.value)),
            file_id=payload.get("file_id"),
            error=payload.get("error"),
            conversion_progress=int(payload.get("conversionProgress") or 0),
        )


@dataclass
class FileSummary:
    id: str
    name: str
    size: int
    exists: bool


@dataclass
class TaskDetail:
    """Full task record as returned by the task listing endpoint."""

    id: str
    type: str
    status: TaskStatus
    error: Optional[str] = None
    url: Optional[str] = None
    date_created: Optional[str] = None
    date_finished: Optional[str] = None
    conversion_progress: int = 0
    file_source: Optional[FileSummary] = None
    file_result: Optional[FileSummary] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TaskDetail":
        return cls(
            id=str(payload.get("id", "")),
            type=str(payload.get("type", "")),
            status=TaskStatus(payload.get("status", TaskStatus.PENDING.value)),
            error=payload.get("error"),
            url=payload.get("url"),
            date_created=payload.get("dateCreated"),
            date_finished=payload.get("dateFinished"),
            conversion_progress=int(payload.get("conversionProgress") or 0),
            file_source=_file_summary(payload.get("fileSource")),
            file_result=_file_summary(payload.get("fileResult")),
        )


def _file_summary(payload: Optional[Dict[str, Any]]) -> Optional[FileSummary]:
    if not payload:
        return None
    return FileSummary(
        id=str(payload.get("id", "")),
        name=str(payload.get("name", "")),
        size=int(payload.get("size") or 0),
        exists=bool(payload.get("exists", False)),
    )


@dataclass
class UserInfo:
    email: str


@dataclass
class ConversionConfig:
    """One conversion type advertised by the server."""

    type: str
    title: str
    options: List[str] = field(default_factory=list)


@dataclass
class ApiConfig:
    conversions: List[ConversionConfig] = field(default_factory=list)
