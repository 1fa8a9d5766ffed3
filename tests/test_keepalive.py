import asyncio

import httpx
import pytest

from rednote_api.services.keepalive import keepalive_loop, start_keepalive


@pytest.mark.asyncio
async def test_no_task_without_target():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    assert start_keepalive(client, None, 1) is None
    assert start_keepalive(client, "", 1) is None
    await client.aclose()


@pytest.mark.asyncio
async def test_pings_health_and_survives_failures():
    hits = []

    def handler(request):
        hits.append(str(request.url))
        if len(hits) == 1:
            raise httpx.ConnectError("down", request=request)
        return httpx.Response(200, text="ok")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    task = asyncio.create_task(keepalive_loop(client, "https://self.test/", 0.01))
    for _ in range(200):
        if len(hits) >= 3:
            break
        await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    await client.aclose()

    assert len(hits) >= 3
    assert set(hits) == {"https://self.test/health"}


@pytest.mark.asyncio
async def test_malformed_target_does_not_end_the_loop():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    task = asyncio.create_task(keepalive_loop(client, "http://[::1", 0.01))
    await asyncio.sleep(0.1)

    assert not task.done()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    await client.aclose()
