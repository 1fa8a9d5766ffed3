import re
from typing import Optional

import httpx

from rednote_api.core.errors import InvalidInput, UpstreamFailure
from rednote_api.core.security import is_http_url
from rednote_api.models.internal import ProbeResult
from rednote_api.services.content_type import is_allowed_media_type
from rednote_api.services.fetcher import RemoteFetcher

CONTENT_RANGE_TOTAL = re.compile(r"/(\d+)\s*$")


def _content_length(resp: httpx.Response) -> Optional[int]:
    """Full resource size; a ranged reply carries it in Content-Range"""
    match = CONTENT_RANGE_TOTAL.search(resp.headers.get("content-range", ""))
    if match:
        return int(match.group(1))
    length = resp.headers.get("content-length", "")
    if resp.status_code != 206 and length.isdigit():
        return int(length)
    return None


class ProbeService:
    """Content-type pre-screen for the download proxy"""

    def __init__(self, fetcher: RemoteFetcher):
        self.fetcher = fetcher

    async def probe(self, url: str) -> ProbeResult:
        """
        HEAD first; if that fails or omits Content-Type, ask for the first
        two bytes with a ranged GET. Bodies are never read.
        """
        if not is_http_url(url):
            raise InvalidInput(f"not an http(s) URL: {url!r}")

        resp = await self.fetcher.fetch(url, method="HEAD")
        await resp.aclose()
        if not resp.is_success or not resp.headers.get("content-type"):
            resp = await self.fetcher.fetch(url, headers={"Range": "bytes=0-1"})
            await resp.aclose()

        if not resp.is_success:
            raise UpstreamFailure(resp.status_code)

        content_type = resp.headers.get("content-type", "")
        content_length = _content_length(resp)
        if not is_allowed_media_type(content_type):
            return ProbeResult(
                ok=False,
                content_type=content_type,
                content_length=content_length,
                error=f"content type not allowed: {content_type or 'missing'}",
            )
        return ProbeResult(ok=True, content_type=content_type, content_length=content_length)
