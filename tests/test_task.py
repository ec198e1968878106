"""Tests for the task entity."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from conversiontools.core.errors import ConversionError
from conversiontools.core.files import FilesAPI
from conversiontools.core.models import TaskStatus, TaskStatusResponse
from conversiontools.core.polling import PollingOptions
from conversiontools.core.task import NO_RESULT_MESSAGE, Task
from conversiontools.core.tasks import TasksAPI
from helpers import RESULT_ID, TASK_ID, sequence

FAST = PollingOptions(interval=0.01, max_interval=0.02)


def status_body(status, progress=0, file_id=None, error=None):
    return httpx.Response(
        200,
        json={"error": error, "status": status, "file_id": file_id, "conversionProgress": progress},
    )


def make_task(http, **kwargs):
    return Task(
        TASK_ID, "convert.xml_to_csv", TasksAPI(http), FilesAPI(http), polling=FAST, **kwargs
    )


class TestInvariants:
    def test_defaults(self):
        task = Task(TASK_ID, "convert.xml_to_csv", AsyncMock(), AsyncMock())

        assert task.status is TaskStatus.PENDING
        assert task.is_running and not task.is_complete
        assert task.file_id is None and task.error is None
        assert task.conversion_progress == 0

    def test_file_id_only_kept_on_success(self):
        task = Task(
            TASK_ID, "t", AsyncMock(), AsyncMock(), status=TaskStatus.RUNNING, file_id=RESULT_ID
        )
        assert task.file_id is None

    def test_error_only_kept_on_failure(self):
        task = Task(TASK_ID, "t", AsyncMock(), AsyncMock(), status=TaskStatus.SUCCESS, error="boom")
        assert task.error is None

    def test_to_dict(self):
        task = Task(
            TASK_ID,
            "convert.xml_to_csv",
            AsyncMock(),
            AsyncMock(),
            status=TaskStatus.SUCCESS,
            file_id=RESULT_ID,
            conversion_progress=100,
        )

        assert task.to_dict() == {
            "id": TASK_ID,
            "type": "convert.xml_to_csv",
            "status": "SUCCESS",
            "fileId": RESULT_ID,
            "error": None,
            "conversionProgress": 100,
        }


@pytest.mark.asyncio
class TestRefresh:
    async def test_refresh_reflects_server(self, make_http):
        http, recorder = make_http(sequence(status_body("RUNNING", 40)))
        task = make_task(http)

        await task.refresh()
        first = task.to_dict()
        await task.refresh()

        assert task.to_dict() == first
        assert task.status is TaskStatus.RUNNING
        assert task.conversion_progress == 40
        assert len(recorder.requests) == 2
        await http.aclose()


@pytest.mark.asyncio
class TestWait:
    async def test_success_fields_match_final_status(self, make_http):
        http, recorder = make_http(
            sequence(
                status_body("PENDING"),
                status_body("RUNNING", 50),
                status_body("SUCCESS", 100, file_id=RESULT_ID),
            )
        )
        task = make_task(http)
        seen = []

        await task.wait(on_progress=seen.append)

        assert task.status is TaskStatus.SUCCESS
        assert task.is_success and task.is_complete
        assert task.file_id == RESULT_ID
        assert task.conversion_progress == 100
        assert [event.status for event in seen] == [TaskStatus.PENDING, TaskStatus.RUNNING]
        assert len(recorder.requests) == 3
        await http.aclose()

    async def test_failed_task_raises_conversion_error(self, make_http):
        http, _ = make_http(
            sequence(status_body("RUNNING", 10), status_body("ERROR", error="Invalid XML file"))
        )
        task = make_task(http)

        with pytest.raises(ConversionError) as excinfo:
            await task.wait()

        assert excinfo.value.task_id == TASK_ID
        assert excinfo.value.task_error == "Invalid XML file"
        assert excinfo.value.code == "CONVERSION_ERROR"
        assert task.is_error
        assert task.error == "Invalid XML file"
        assert task.file_id is None
        await http.aclose()

    async def test_explicit_zero_interval_is_kept(self, make_http):
        http, _ = make_http(
            sequence(status_body("RUNNING"), status_body("SUCCESS", 100, RESULT_ID))
        )
        task = make_task(http)

        with patch("conversiontools.core.polling.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await task.wait(interval=0)

        sleep.assert_awaited_once_with(0)
        await http.aclose()


@pytest.mark.asyncio
class TestDownload:
    async def test_before_completion_raises_without_request(self, make_http):
        http, recorder = make_http(sequence(httpx.Response(200, content=b"x")))
        task = make_task(http, status=TaskStatus.RUNNING)

        with pytest.raises(ConversionError, match=NO_RESULT_MESSAGE):
            await task.download_bytes()

        assert recorder.requests == []
        await http.aclose()

    async def test_downloads_result(self, make_http, tmp_path):
        http, recorder = make_http(sequence(httpx.Response(200, content=b"a,b\n")))
        task = make_task(http, status=TaskStatus.SUCCESS, file_id=RESULT_ID)

        path = await task.download_to(tmp_path / "out.csv")

        assert path == str(tmp_path / "out.csv")
        assert recorder.paths() == [f"GET /v1/files/{RESULT_ID}"]
        await http.aclose()
