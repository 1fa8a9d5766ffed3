import pytest

from conftest import fail_with, html_page, media_file
from rednote_api.config.settings import config
from rednote_api.infra.concurrency import COUNTER_KEY

CAT_PAGE = (
    '<html><head><title>Cat</title><meta property="og:image" content="https://x.test/c.jpg">'
    '</head><body>https://x.test/v.mp4</body></html>'
)


@pytest.mark.asyncio
async def test_health_check(api):
    """Test public health endpoint"""
    async with api as ac:
        response = await ac.get("/health")
    assert response.status_code == 200
    assert response.text == "ok"
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_resolve_success(api, upstream):
    upstream["https://x.test/p"] = html_page(CAT_PAGE)
    async with api as ac:
        response = await ac.get("/api/resolve/rednote", params={"url": "https://x.test/p"})
    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "page": "https://x.test/p",
        "title": "Cat",
        "cover": "https://x.test/c.jpg",
        "media": [{"url": "https://x.test/v.mp4", "type": "video/mp4"}],
    }


@pytest.mark.asyncio
async def test_resolve_duplicates_collapse(api, upstream):
    upstream["https://x.test/p"] = html_page(
        '<meta property="og:video" content="https://x.test/a.mp4">'
        '<script>a="https://x.test/a.mp4";b="https:\\/\\/x.test\\/a.mp4"</script>'
    )
    async with api as ac:
        response = await ac.get("/api/resolve/rednote", params={"url": "https://x.test/p"})
    assert [m["url"] for m in response.json()["media"]] == ["https://x.test/a.mp4"]


@pytest.mark.asyncio
async def test_resolve_no_media_is_ok_false_with_200(api, upstream):
    upstream["https://x.test/p"] = html_page("<html><body>nothing here</body></html>")
    async with api as ac:
        response = await ac.get("/api/resolve/rednote", params={"url": "https://x.test/p"})
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is False
    assert body["error"]


@pytest.mark.asyncio
async def test_resolve_invalid_url(api, sent):
    async with api as ac:
        missing = await ac.get("/api/resolve/rednote")
        bad = await ac.get("/api/resolve/rednote", params={"url": "file:///etc/passwd"})
    assert missing.status_code == 400
    assert bad.status_code == 400
    assert bad.json() == {"ok": False, "error": "Invalid URL"}
    assert sent == []


@pytest.mark.asyncio
async def test_resolve_localized_error(api):
    async with api as ac:
        response = await ac.get(
            "/api/resolve/rednote",
            params={"url": "nope"},
            headers={"Accept-Language": "id-ID,id;q=0.9"},
        )
    assert response.json()["error"] == "URL tidak valid"


@pytest.mark.asyncio
async def test_resolve_network_failure(api, upstream):
    upstream["https://x.test/p"] = fail_with()
    async with api as ac:
        response = await ac.get("/api/resolve/rednote", params={"url": "https://x.test/p"})
    assert response.status_code == 500
    body = response.json()
    assert body["ok"] is False
    assert "unreachable" not in body["error"]


@pytest.mark.asyncio
async def test_download_streams_attachment(api, upstream):
    upstream["https://cdn.x.test/v.mp4"] = media_file(b"video-bytes", "video/mp4")
    async with api as ac:
        response = await ac.get(
            "/api/download",
            params={"url": "https://cdn.x.test/v.mp4", "filename": "../../etc/passwd"},
        )
    assert response.status_code == 200
    assert response.content == b"video-bytes"
    assert response.headers["content-type"] == "video/mp4"
    disposition = response.headers["content-disposition"]
    assert disposition.startswith("attachment; filename=")
    assert "/" not in disposition and ".." not in disposition


@pytest.mark.asyncio
async def test_download_upstream_404(api, upstream):
    upstream["https://cdn.x.test/v.mp4"] = media_file(b"secret error page", "text/html", status=404)
    async with api as ac:
        response = await ac.get("/api/download", params={"url": "https://cdn.x.test/v.mp4"})
    assert response.status_code == 400
    assert "404" in response.text
    assert "secret error page" not in response.text
    assert "content-disposition" not in response.headers


@pytest.mark.asyncio
async def test_download_refuses_html(api, upstream):
    upstream["https://x.test/admin"] = html_page("<h1>internal</h1>")
    async with api as ac:
        response = await ac.get("/api/download", params={"url": "https://x.test/admin"})
    assert response.status_code == 415
    assert "internal" not in response.text


@pytest.mark.asyncio
async def test_download_invalid_url(api):
    async with api as ac:
        response = await ac.get("/api/download", params={"url": "data:text/plain,hi"})
    assert response.status_code == 400
    assert response.text == "Invalid URL"


@pytest.mark.asyncio
async def test_download_network_failure(api, upstream):
    upstream["https://cdn.x.test/v.mp4"] = fail_with()
    async with api as ac:
        response = await ac.get("/api/download", params={"url": "https://cdn.x.test/v.mp4"})
    assert response.status_code == 500


@pytest.mark.asyncio
async def test_head_probe_ok(api, upstream):
    upstream["https://cdn.x.test/v.mp4"] = media_file(b"12345", "video/mp4")
    async with api as ac:
        response = await ac.post("/api/head", json={"url": "https://cdn.x.test/v.mp4"})
    assert response.status_code == 200
    assert response.json() == {"ok": True, "contentType": "video/mp4", "contentLength": 5}


@pytest.mark.asyncio
async def test_head_probe_rejected_type(api, upstream):
    upstream["https://x.test/page"] = html_page("<p>hi</p>")
    async with api as ac:
        response = await ac.post("/api/head", json={"url": "https://x.test/page"})
    body = response.json()
    assert body["ok"] is False
    assert body["contentType"].startswith("text/html")
    assert body["error"]


@pytest.mark.asyncio
async def test_head_probe_invalid(api):
    async with api as ac:
        response = await ac.post("/api/head", json={})
    assert response.status_code == 400
    assert response.json()["ok"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {},
    {"content": b"not json", "headers": {"Content-Type": "application/json"}},
    {"json": {"url": 123}},
    {"json": ["https://cdn.x.test/v.mp4"]},
    {"content": b"null", "headers": {"Content-Type": "application/json"}},
])
async def test_head_probe_unusable_body(api, sent, body):
    async with api as ac:
        response = await ac.post("/api/head", **body)
    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "Invalid URL"}
    assert sent == []


@pytest.mark.asyncio
async def test_og_endpoint(api, upstream):
    upstream["https://x.test/a"] = html_page(
        '<meta property="og:title" content="Hello"><meta property="og:image" content="https://x.test/i.jpg">'
    )
    async with api as ac:
        response = await ac.get("/api/og", params={"url": "https://x.test/a"})
    assert response.json() == {"ok": True, "title": "Hello", "image": "https://x.test/i.jpg"}


@pytest.mark.asyncio
async def test_og_endpoint_invalid(api):
    async with api as ac:
        response = await ac.get("/api/og", params={"url": "mailto:a@x.test"})
    assert response.status_code == 400
    assert response.json()["ok"] is False


# Limiters (Redis-backed)

@pytest.mark.asyncio
async def test_rate_limit_keeps_json_error_shape(api, fake_redis, monkeypatch):
    monkeypatch.setattr(config.rate_limit, "max_requests", 2)
    async with api as ac:
        allowed = [await ac.get("/api/resolve/rednote", params={"url": "nope"}) for _ in range(2)]
        limited = await ac.get("/api/resolve/rednote", params={"url": "nope"})
    assert [r.status_code for r in allowed] == [400, 400]
    assert limited.status_code == 429
    assert int(limited.headers["Retry-After"]) > 0
    body = limited.json()
    assert body["ok"] is False
    assert body["error"]


@pytest.mark.asyncio
async def test_rate_limit_on_download_is_plain_text(api, fake_redis, monkeypatch):
    monkeypatch.setattr(config.rate_limit, "max_requests", 1)
    async with api as ac:
        await ac.get("/api/download", params={"url": "nope"})
        limited = await ac.get("/api/download", params={"url": "nope"})
    assert limited.status_code == 429
    assert limited.headers["content-type"].startswith("text/plain")
    assert "Retry-After" in limited.headers


@pytest.mark.asyncio
async def test_download_rejected_when_all_slots_taken(api, fake_redis, upstream, sent):
    upstream["https://cdn.x.test/v.mp4"] = media_file(b"video-bytes", "video/mp4")
    await fake_redis.set(COUNTER_KEY, config.download.max_concurrent)
    async with api as ac:
        response = await ac.get("/api/download", params={"url": "https://cdn.x.test/v.mp4"})
    assert response.status_code == 503
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text
    assert sent == []


@pytest.mark.asyncio
async def test_download_slot_released_after_stream(api, fake_redis, upstream):
    upstream["https://cdn.x.test/v.mp4"] = media_file(b"video-bytes", "video/mp4")
    async with api as ac:
        response = await ac.get("/api/download", params={"url": "https://cdn.x.test/v.mp4"})
    assert response.content == b"video-bytes"
    assert await fake_redis.get(COUNTER_KEY) == "0"
    assert await fake_redis.keys("active_download:*") == []


@pytest.mark.asyncio
@pytest.mark.parametrize("route", [
    media_file(b"gone", "text/html", status=404),
    html_page("<h1>not media</h1>"),
    fail_with(),
])
async def test_download_slot_released_on_failure(api, fake_redis, upstream, route):
    upstream["https://cdn.x.test/v.mp4"] = route
    async with api as ac:
        response = await ac.get("/api/download", params={"url": "https://cdn.x.test/v.mp4"})
    assert response.status_code in (400, 415, 500)
    assert await fake_redis.get(COUNTER_KEY) == "0"
    assert await fake_redis.keys("active_download:*") == []
