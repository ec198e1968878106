"""Mock transport helpers shared by the test modules."""

from __future__ import annotations

from typing import Callable, List

import httpx

API_TOKEN = "test_1234567890abcdef"
BASE_URL = "https://api.test/v1"
FILE_ID = "a" * 32
TASK_ID = "b" * 32
RESULT_ID = "c" * 32

Handler = Callable[[httpx.Request], httpx.Response]


class Recorder:
    """Collects every request a mock transport receives."""

    def __init__(self, handler: Handler) -> None:
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def paths(self) -> List[str]:
        return [f"{request.method} {request.url.path}" for request in self.requests]


def sequence(*responses: httpx.Response) -> Handler:
    """Handler returning the given responses in order, repeating the last one."""
    remaining = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        template = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        return httpx.Response(
            template.status_code, headers=template.headers, content=template.content
        )

    return handler


class BrokenStream(httpx.AsyncByteStream):
    """Response body that yields ``head`` and then fails mid-transfer."""

    def __init__(self, head: bytes = b'{"err', error: type = httpx.ReadError) -> None:
        self.head = head
        self.error = error

    async def __aiter__(self):
        yield self.head
        raise self.error("connection reset")

    async def aclose(self) -> None:
        pass
