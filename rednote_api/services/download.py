import logging
from typing import AsyncIterator, Tuple

import httpx

from rednote_api.core.errors import DisallowedContentType, InvalidInput, NetworkFailure, UpstreamFailure
from rednote_api.core.security import is_http_url
from rednote_api.models.internal import DownloadRequest
from rednote_api.services.content_type import extension_for, is_allowed_media_type
from rednote_api.services.fetcher import RemoteFetcher
from rednote_api.utils.filename import content_disposition, sanitize_filename
from rednote_api.utils.locale import safe_url_for_log

DEFAULT_CONTENT_TYPE = "application/octet-stream"

logger = logging.getLogger(__name__)


class MediaStream:
    """
    Upstream body relayed chunk by chunk.
    The upstream response is closed once iteration stops for any reason,
    or by aclose(), which also works before the first chunk.
    """

    def __init__(self, upstream: httpx.Response, chunk_size: int, safe_url: str):
        self.upstream = upstream
        self.chunk_size = chunk_size
        self.safe_url = safe_url
        self.sent = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self.upstream.aiter_bytes(self.chunk_size):
                self.sent += len(chunk)
                yield chunk
        except httpx.RequestError as e:
            logger.error(f"Upstream stream error for {self.safe_url} after {self.sent} bytes: {e}")
            raise NetworkFailure(str(e)) from e
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        if self.upstream.is_closed:
            return
        await self.upstream.aclose()
        logger.debug(f"Closed upstream {self.safe_url} ({self.sent} bytes relayed)")


class DownloadService:
    """Streams a remote media resource back as an attachment"""

    def __init__(
        self,
        fetcher: RemoteFetcher,
        chunk_size: int = 64 * 1024,
        enforce_content_type: bool = True,
        default_filename: str = "download",
    ):
        self.fetcher = fetcher
        self.chunk_size = chunk_size
        self.enforce_content_type = enforce_content_type
        self.default_filename = default_filename

    async def open(self, request: DownloadRequest) -> Tuple[MediaStream, dict, str]:
        """
        Start the upstream download.
        Returns (stream, headers, media_type); nothing is streamed when
        the upstream status or content type is rejected.
        """
        if not is_http_url(request.source_url):
            raise InvalidInput(f"not an http(s) URL: {request.source_url!r}")

        safe_name = sanitize_filename(request.desired_filename, default=self.default_filename)

        upstream = await self.fetcher.fetch(request.source_url, referer=request.referer_url)

        if not upstream.is_success:
            await upstream.aclose()
            raise UpstreamFailure(upstream.status_code)

        declared = upstream.headers.get("content-type", "")
        if self.enforce_content_type and not is_allowed_media_type(declared):
            await upstream.aclose()
            raise DisallowedContentType(declared)

        filename = f"{safe_name}.{extension_for(declared, request.source_url)}"
        media_type = declared or DEFAULT_CONTENT_TYPE

        headers = {
            "Content-Disposition": content_disposition(filename),
            "X-Content-Type-Options": "nosniff",
            "Cache-Control": "no-cache",
        }
        # Identity-encoded bodies only; a compressed length would not match
        if "content-length" in upstream.headers and not upstream.headers.get("content-encoding"):
            headers["Content-Length"] = upstream.headers["content-length"]

        return MediaStream(upstream, self.chunk_size, safe_url_for_log(request.source_url)), headers, media_type
