import json
from collections.abc import Callable

import httpx
import pytest

from gamma_mcp.config import Settings
from gamma_mcp.providers.gamma import GammaAPI

BASE_URL = "https://gamma.test/v1.0"
GENERATIONS_URL = f"{BASE_URL}/generations"


class FakeClock:
    """Monotonic clock that only moves when the code under test sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingHandler:
    """httpx.MockTransport handler that records requests and answers from a callable."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    def calls(self, method: str, url: str | None = None) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method and (url is None or str(request.url) == url)
        ]

    def body(self, index: int = 0) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        GAMMA_API_KEY="test-key",
        GAMMA_BASE_URL=BASE_URL,
        GAMMA_GENERATION_TIMEOUT_SECONDS=600,
        GAMMA_POLL_INTERVAL_SECONDS=30,
        GAMMA_DOWNLOAD_DIR=str(tmp_path / "downloads"),
        GAMMA_PROMPTS_PUBLIC_DIR=str(tmp_path / "prompts" / "public"),
        GAMMA_PROMPTS_PRIVATE_DIR=str(tmp_path / "prompts" / "private"),
        GAMMA_PROMPTS_HOT_RELOAD=False,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_api(settings):
    def _make(respond: Callable[[httpx.Request], httpx.Response]) -> tuple[GammaAPI, RecordingHandler]:
        handler = RecordingHandler(respond)
        return GammaAPI(settings, transport=httpx.MockTransport(handler)), handler

    return _make
