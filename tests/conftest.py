from typing import Callable, Dict, List

import fakeredis.aioredis
import httpx
import pytest

from rednote_api.config.settings import config
from rednote_api.core.state import state
from rednote_api.services.fetcher import RemoteFetcher

TEST_UA = "pytest-agent/1.0"

Route = Callable[[httpx.Request], httpx.Response]


def html_page(body: str, status: int = 200) -> Route:
    return lambda request: httpx.Response(status, text=body, headers={"Content-Type": "text/html; charset=utf-8"})


def media_file(content: bytes, content_type: str = "video/mp4", status: int = 200, **headers) -> Route:
    all_headers = {"Content-Type": content_type, **headers} if content_type else dict(headers)
    return lambda request: httpx.Response(status, content=content, headers=all_headers)


def redirect_to(location: str, status: int = 302) -> Route:
    return lambda request: httpx.Response(status, headers={"Location": location})


def fail_with(exc_type=httpx.ConnectError) -> Route:
    def route(request):
        raise exc_type("upstream unreachable", request=request)
    return route



class TrackedBody(httpx.AsyncByteStream):
    """Upstream body that counts the chunks pulled from it and notes when it is closed"""

    def __init__(self, chunk: bytes, count: int):
        self.chunk = chunk
        self.count = count
        self.pulled = 0
        self.closed = False

    async def __aiter__(self):
        for _ in range(self.count):
            self.pulled += 1
            yield self.chunk

    async def aclose(self):
        self.closed = True


def tracked(body: TrackedBody, content_type: str) -> Route:
    return lambda request: httpx.Response(200, stream=body, headers={"Content-Type": content_type})


@pytest.fixture(autouse=True)
def no_ssrf_dns(monkeypatch):
    """Test hosts (*.test) never resolve; endpoint tests skip the DNS guard"""
    monkeypatch.setattr(config.security, "enable_ssrf_protection", False)


@pytest.fixture
def upstream() -> Dict[str, Route]:
    """URL -> route served by the mocked remote side"""
    return {}


@pytest.fixture
def sent() -> List[httpx.Request]:
    """Requests the mocked remote side received"""
    return []


@pytest.fixture
def upstream_client(upstream, sent):
    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        route = upstream.get(str(request.url))
        if route is None:
            return httpx.Response(404, text="not found")
        return route(request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)


@pytest.fixture
def fetcher(upstream_client):
    return RemoteFetcher(upstream_client, TEST_UA)


@pytest.fixture
def api(upstream_client):
    """ASGI client against the app, outbound traffic served by `upstream`"""
    from rednote_api.api.deps import get_http_client
    from rednote_api.main import app

    app.dependency_overrides[get_http_client] = lambda: upstream_client
    yield httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
    app.dependency_overrides.clear()


@pytest.fixture
def fake_redis(monkeypatch):
    """In-memory Redis (Lua capable) behind the rate and download limiters"""
    redis = fakeredis.aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    monkeypatch.setattr(state, "redis", redis)
    return redis
