"""Shared test fixtures and configuration."""

from __future__ import annotations

import httpx
import pytest

from conversiontools.core.client import ConversionToolsClient
from conversiontools.core.http import HttpClient
from helpers import API_TOKEN, BASE_URL, Handler, Recorder


@pytest.fixture
def make_http():
    """Build an ``HttpClient`` backed by a recorded mock transport."""

    def factory(handler: Handler, **kwargs) -> tuple[HttpClient, Recorder]:
        recorder = Recorder(handler)
        kwargs.setdefault("retry_delay", 0.01)
        http = HttpClient(
            API_TOKEN,
            base_url=BASE_URL,
            transport=httpx.MockTransport(recorder),
            **kwargs,
        )
        return http, recorder

    return factory


@pytest.fixture
def make_client():
    """Build a ``ConversionToolsClient`` backed by a recorded mock transport."""

    def factory(handler: Handler, **kwargs) -> tuple[ConversionToolsClient, Recorder]:
        recorder = Recorder(handler)
        kwargs.setdefault("retry_delay", 0.01)
        kwargs.setdefault("polling_interval", 0.01)
        kwargs.setdefault("max_polling_interval", 0.02)
        client = ConversionToolsClient(
            api_token=API_TOKEN,
            base_url=BASE_URL,
            transport=httpx.MockTransport(recorder),
            **kwargs,
        )
        return client, recorder

    return factory


@pytest.fixture
def sample_xml(tmp_path):
    path = tmp_path / "data.xml"
    path.write_text("<rows><row><a>1</a></row></rows>", encoding="utf-8")
    return path
