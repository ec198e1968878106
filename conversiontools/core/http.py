"""HTTP transport for the Conversion Tools REST API."""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, Sequence

import httpx

from conversiontools.core.errors import (
    AuthenticationError,
    ConversionToolsError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RemoteFileNotFoundError,
    RequestTimeoutError,
    TaskNotFoundError,
    ValidationError,
)
from conversiontools.core.models import QuotaWindow, RateLimits
from conversiontools.core.retry import DEFAULT_RETRYABLE_STATUSES, RetryOptions, with_retry
from conversiontools.core.settings import BASE_URL, DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Upgrade your plan at https://conversiontools.io/pricing"


class HttpClient:
    """Authenticated request helper with retries and rate-limit tracking."""

    def __init__(
        self,
        api_token: str,
        base_url: str = BASE_URL,
        timeout: float = 300.0,
        retries: int = 3,
        retry_delay: float = 1.0,
        retryable_statuses: Sequence[int] = DEFAULT_RETRYABLE_STATUSES,
        user_agent: str | None = DEFAULT_USER_AGENT,
        should_retry: Optional[Callable[[BaseException], bool]] = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self.retry_options = RetryOptions(
            retries=retries,
            retry_delay=retry_delay,
            retryable_statuses=tuple(retryable_statuses),
            should_retry=should_retry,
        )
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._rate_limits: RateLimits | None = None

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def get_rate_limits(self) -> RateLimits | None:
        """Quota snapshot from the last response that carried rate-limit headers."""
        return self._rate_limits

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Accept": "application/json",
        }
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        if extra:
            headers.update(extra)
        return headers

    def _build_url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        files: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        raw: bool = False,
        cancel_event: asyncio.Event | None = None,
        check_error: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        With ``raw=True`` the unread streaming ``httpx.Response`` is returned
        and the caller must close it.
        """

        async def attempt() -> Any:
            request = self._client.build_request(
                method,
                self._build_url(path),
                headers=self._headers(headers),
                json=json,
                files=files,
                params=params,
            )
            response = await self._send(request, cancel_event)
            try:
                self._extract_rate_limits(response.headers)
                if response.status_code >= 400:
                    with self.transport_errors():
                        await response.aread()
                    self._raise_for_status(response)
                if raw:
                    return response
                with self.transport_errors():
                    await response.aread()
            except BaseException:
                await response.aclose()
                raise
            data = self._parse_json(response)
            if check_error and isinstance(data, dict) and data.get("error"):
                raise ConversionToolsError(
                    str(data["error"]), "API_ERROR", response.status_code, data
                )
            return data

        return await with_retry(attempt, self.retry_options)

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def _send(
        self, request: httpx.Request, cancel_event: asyncio.Event | None
    ) -> httpx.Response:
        with self.transport_errors():
            if cancel_event is None:
                return await self._client.send(request, stream=True)
            return await self._send_cancellable(request, cancel_event)

    @contextmanager
    def transport_errors(self) -> Iterator[None]:
        """Translate httpx failures, including ones raised while reading a body."""
        try:
            yield
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(
                f"Request timed out after {self.timeout}s", self.timeout
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Network request failed: {exc}", exc) from exc

    async def _send_cancellable(
        self, request: httpx.Request, cancel_event: asyncio.Event
    ) -> httpx.Response:
        if cancel_event.is_set():
            raise RequestTimeoutError("Request aborted", self.timeout, aborted=True)
        send_task = asyncio.ensure_future(self._client.send(request, stream=True))
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({send_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            send_task.cancel()
            raise
        finally:
            cancel_task.cancel()
        if not send_task.done():
            send_task.cancel()
            try:
                await send_task
            except asyncio.CancelledError:
                pass
            raise RequestTimeoutError("Request aborted", self.timeout, aborted=True)
        return send_task.result()

    def _extract_rate_limits(self, headers: httpx.Headers) -> None:
        limits = RateLimits()

        daily_limit = _int_header(headers, "x-ratelimit-limit-tasks")
        daily_remaining = _int_header(headers, "x-ratelimit-limit-tasks-remaining")
        if daily_limit is not None and daily_remaining is not None:
            limits.daily = QuotaWindow(daily_limit, daily_remaining)

        monthly_limit = _int_header(headers, "x-ratelimit-limit-tasks-monthly")
        monthly_remaining = _int_header(headers, "x-ratelimit-limit-tasks-monthly-remaining")
        if monthly_limit is not None and monthly_remaining is not None:
            limits.monthly = QuotaWindow(monthly_limit, monthly_remaining)

        limits.file_size = _int_header(headers, "x-ratelimit-limit-filesize")

        if limits.daily or limits.monthly or limits.file_size is not None:
            self._rate_limits = limits

    @staticmethod
    def _parse_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            snippet = response.text.strip().replace("\n", " ")[:200]
            raise ConversionToolsError(
                f"Invalid JSON response: {snippet}", "API_ERROR", response.status_code
            ) from exc

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        error_data: Any = None
        try:
            error_data = response.json()
        except ValueError:
            pass
        server_message = None
        if isinstance(error_data, dict) and error_data.get("error"):
            server_message = str(error_data["error"])
        message = server_message or response.reason_phrase or f"HTTP {status}"
        logger.debug(f"Conversion Tools API error {status}: {message}")

        error: ConversionToolsError
        if status == 401:
            error = AuthenticationError(message)
        elif status == 400:
            error = ValidationError(message)
        elif status == 404:
            # The API only tells file and task lookups apart in the message text.
            lowered = message.lower()
            if "file" in lowered:
                error = RemoteFileNotFoundError(message)
            elif "task" in lowered:
                error = TaskNotFoundError(message)
            else:
                error = NotFoundError(message)
        elif status == 429:
            error = RateLimitError(server_message or RATE_LIMIT_MESSAGE, self._rate_limits)
        elif status == 408:
            error = RequestTimeoutError(message, self.timeout)
        else:
            error = ConversionToolsError(message, "HTTP_ERROR", status)
        error.response = error_data
        raise error


def _int_header(headers: httpx.Headers, name: str) -> Optional[int]:
    value = headers.get(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None
