"""Tests for the polling loop."""

from unittest.mock import AsyncMock, patch

import pytest

from conversiontools.core.errors import RequestTimeoutError
from conversiontools.core.models import TaskStatus, TaskStatusResponse
from conversiontools.core.polling import PollingOptions, poll, poll_task_status


def statuses(*values):
    """Async fetcher returning the given statuses in order, repeating the last."""
    pending = list(values)
    calls = {"count": 0}

    async def fetch():
        calls["count"] += 1
        status = pending.pop(0) if len(pending) > 1 else pending[0]
        return TaskStatusResponse(TaskStatus(status), conversion_progress=calls["count"] * 10)

    return fetch, calls


@pytest.mark.asyncio
class TestPoll:
    async def test_terminal_first_result_never_sleeps(self):
        fetch, calls = statuses("SUCCESS")
        with patch("conversiontools.core.polling.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await poll_task_status(fetch, PollingOptions())

        assert result.status is TaskStatus.SUCCESS
        assert calls["count"] == 1
        sleep.assert_not_awaited()

    async def test_intervals_grow_and_cap(self):
        fetch, calls = statuses(*["RUNNING"] * 5, "SUCCESS")
        options = PollingOptions(interval=1.0, max_interval=3.0, backoff=2.0)
        with patch("conversiontools.core.polling.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await poll_task_status(fetch, options)

        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0, 3.0, 3.0, 3.0]
        assert calls["count"] == 6

    async def test_reports_each_in_flight_result(self):
        seen = []
        fetch, _ = statuses("PENDING", "RUNNING", "SUCCESS")
        options = PollingOptions(interval=0.01, on_progress=seen.append)
        with patch("conversiontools.core.polling.asyncio.sleep", new_callable=AsyncMock):
            final = await poll_task_status(fetch, options)

        assert [event.status for event in seen] == [TaskStatus.PENDING, TaskStatus.RUNNING]
        assert final.status is TaskStatus.SUCCESS

    async def test_error_is_terminal(self):
        fetch, calls = statuses("RUNNING", "ERROR")
        with patch("conversiontools.core.polling.asyncio.sleep", new_callable=AsyncMock):
            result = await poll_task_status(fetch, PollingOptions())

        assert result.status is TaskStatus.ERROR
        assert calls["count"] == 2

    async def test_times_out(self):
        fetch, calls = statuses("RUNNING")
        options = PollingOptions(interval=0.01, max_interval=0.01, timeout=0.05)

        with pytest.raises(RequestTimeoutError) as excinfo:
            await poll_task_status(fetch, options)

        assert excinfo.value.timeout == 0.05
        assert "Polling timed out" in str(excinfo.value)
        assert calls["count"] >= 2

    async def test_generic_predicate(self):
        counter = {"n": 0}

        async def fetch():
            counter["n"] += 1
            return counter["n"]

        with patch("conversiontools.core.polling.asyncio.sleep", new_callable=AsyncMock):
            result = await poll(fetch, lambda value: value < 4, PollingOptions())

        assert result == 4


class FakeClock:
    """Stands in for ``time`` in the polling module; sleeping advances it."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleep_started = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleep_started.append(self.now)
        self.now += seconds


@pytest.mark.asyncio
class TestTimeoutBound:
    @pytest.mark.parametrize("timeout", [0.5, 2.0, 3.5, 4.0])
    async def test_fires_within_one_interval_of_budget(self, timeout):
        clock = FakeClock()
        fetch, _ = statuses("RUNNING")
        options = PollingOptions(interval=1.0, max_interval=1.0, backoff=1.0, timeout=timeout)

        with patch("conversiontools.core.polling.time", clock), patch(
            "conversiontools.core.polling.asyncio.sleep", clock.sleep
        ):
            with pytest.raises(RequestTimeoutError) as excinfo:
                await poll_task_status(fetch, options)

        assert excinfo.value.timeout == timeout
        assert timeout <= clock.now <= timeout + options.interval
        assert all(started < timeout for started in clock.sleep_started)

    async def test_no_sleep_once_budget_is_spent(self):
        clock = FakeClock()
        fetch, calls = statuses("RUNNING")
        options = PollingOptions(interval=1.0, max_interval=1.0, backoff=1.0, timeout=3.0)

        with patch("conversiontools.core.polling.time", clock), patch(
            "conversiontools.core.polling.asyncio.sleep", clock.sleep
        ):
            with pytest.raises(RequestTimeoutError):
                await poll_task_status(fetch, options)

        assert clock.sleep_started == [0.0, 1.0, 2.0]
        assert clock.now == 3.0
        assert calls["count"] == 4
