import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import pytest

from podcaster.models import PodcastConfig
from podcaster.utils.http_client import create_http_client
from tests.fakes import FEED_URL_A, FEED_URL_B, FakeServer


@pytest.fixture(name="server")
def fake_server() -> FakeServer:
    return FakeServer()


@pytest.fixture(name="run_with_client")
def run_with_client_fixture(server: FakeServer) -> Callable[[Callable[[httpx.AsyncClient], Awaitable[Any]]], Any]:
    """Run a coroutine function with a client wired to the fake server."""

    def _run(func: Callable[[httpx.AsyncClient], Awaitable[Any]]) -> Any:
        async def _main() -> Any:
            async with create_http_client(transport=httpx.MockTransport(server.handle)) as client:
                return await func(client)

        return asyncio.run(_main())

    return _run


@pytest.fixture(name="podcast_a")
def mock_podcast_a() -> PodcastConfig:
    return PodcastConfig(id="a", feed_url=FEED_URL_A)


@pytest.fixture(name="podcast_b")
def mock_podcast_b() -> PodcastConfig:
    return PodcastConfig(id="b", feed_url=FEED_URL_B)
