import logging

from rednote_api.core.errors import InvalidInput, NoMediaFound
from rednote_api.core.security import is_http_url
from rednote_api.models.internal import ResolveResult
from rednote_api.services.extractor import extract_media
from rednote_api.services.fetcher import RemoteFetcher
from rednote_api.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)


class ResolverService:
    """Page URL -> title, cover image and direct media candidates"""

    def __init__(self, fetcher: RemoteFetcher, accept_language: str):
        self.fetcher = fetcher
        self.accept_language = accept_language

    async def resolve(self, page_url: str) -> ResolveResult:
        """
        Validate, fetch (one GET, redirects followed) and extract.
        InvalidInput and NetworkFailure propagate; finding nothing is
        reported as ok=False.
        """
        if not is_http_url(page_url):
            raise InvalidInput(f"not an http(s) URL: {page_url!r}")

        final_url, status, html = await self.fetcher.fetch_text(
            page_url,
            headers={"Accept-Language": self.accept_language},
        )
        logger.debug(f"Fetched {safe_url_for_log(final_url)} ({status}, {len(html)} chars)")

        try:
            page = extract_media(html, base_url=final_url)
        except NoMediaFound as e:
            return ResolveResult(ok=False, page_url=final_url, error=e.message)

        return ResolveResult(
            ok=True,
            page_url=final_url,
            title=page.title,
            cover_image_url=page.cover_image_url,
            media=page.media,
        )
