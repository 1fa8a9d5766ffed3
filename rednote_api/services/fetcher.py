import logging
from typing import Dict, Optional, Tuple

import httpx

from rednote_api.core.errors import InvalidInput, NetworkFailure
from rednote_api.core.security import is_http_url
from rednote_api.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)


def build_client(timeout_seconds: float, max_redirects: int) -> httpx.AsyncClient:
    """Shared outbound client; redirects followed, every request time-bounded"""
    return httpx.AsyncClient(
        follow_redirects=True,
        max_redirects=max_redirects,
        timeout=httpx.Timeout(timeout_seconds),
    )


class RemoteFetcher:
    """
    Outbound HTTP with a fixed identity header.
    One attempt per call; transport errors become NetworkFailure.
    """

    def __init__(self, client: httpx.AsyncClient, user_agent: str, max_text_bytes: int = 5 * 1024 * 1024):
        self.client = client
        self.user_agent = user_agent
        self.max_text_bytes = max_text_bytes

    def _headers(self, referer: Optional[str], extra: Optional[Dict[str, str]]) -> Dict[str, str]:
        headers = {"User-Agent": self.user_agent}
        if referer and is_http_url(referer):
            headers["Referer"] = referer
        if extra:
            headers.update(extra)
        return headers

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        referer: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Send the request and return the open streaming response.
        The caller must close it (aclose) once done with the body.
        """
        if not is_http_url(url):
            raise InvalidInput(f"not an http(s) URL: {url!r}")
        url = url.strip()

        try:
            req = self.client.build_request(method, url, headers=self._headers(referer, headers))
        except httpx.InvalidURL as e:
            raise InvalidInput(str(e)) from e
        try:
            return await self.client.send(req, stream=True)
        except httpx.RequestError as e:
            logger.warning(f"{method} {safe_url_for_log(url)} failed: {e.__class__.__name__}: {e}")
            raise NetworkFailure(str(e)) from e

    async def fetch_text(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> Tuple[str, int, str]:
        """
        GET and decode the body; returns (final_url, status, text).
        At most max_text_bytes are read; the rest of the body is dropped.
        """
        resp = await self.fetch(url, headers=headers)
        body = bytearray()
        try:
            async for chunk in resp.aiter_bytes():
                body.extend(chunk)
                if len(body) >= self.max_text_bytes:
                    logger.debug(f"Truncated {safe_url_for_log(url)} at {self.max_text_bytes} bytes")
                    del body[self.max_text_bytes:]
                    break
        except httpx.RequestError as e:
            raise NetworkFailure(str(e)) from e
        finally:
            await resp.aclose()
        text = bytes(body).decode(resp.encoding or "utf-8", errors="replace")
        return str(resp.url), resp.status_code, text
