from urllib.parse import urljoin

from rednote_api.core.errors import InvalidInput, UpstreamFailure
from rednote_api.core.security import is_http_url
from rednote_api.models.internal import OgMetadata
from rednote_api.services.extractor import extract_og_image, extract_og_title, extract_title
from rednote_api.services.fetcher import RemoteFetcher


class MetadataService:
    """Open Graph title/image of any page, independent of media resolution"""

    def __init__(self, fetcher: RemoteFetcher, accept_language: str):
        self.fetcher = fetcher
        self.accept_language = accept_language

    async def fetch(self, url: str) -> OgMetadata:
        if not is_http_url(url):
            raise InvalidInput(f"not an http(s) URL: {url!r}")

        final_url, status, html = await self.fetcher.fetch_text(
            url,
            headers={"Accept-Language": self.accept_language},
        )
        if not 200 <= status < 300:
            raise UpstreamFailure(status)

        image = extract_og_image(html)
        if image:
            image = urljoin(final_url, image)
        return OgMetadata(
            title=extract_og_title(html) or extract_title(html),
            image=image if is_http_url(image) else "",
        )
