"""Heuristic media extraction from raw HTML.

No DOM parsing: each extractor is a targeted regex so malformed markup and
script-embedded JSON are handled the same way. Results are best effort.
"""

import html as html_lib
import re
from typing import List, Optional
from urllib.parse import urljoin

from rednote_api.core.errors import NoMediaFound
from rednote_api.core.security import is_http_url
from rednote_api.models.internal import ExtractedPage, MediaCandidate

TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)

# Absolute URL ending in .mp4/.m3u8, optional query string
MEDIA_LINK_RE = re.compile(
    r"""https?://[^"'\s<>\\]+?\.(?:mp4|m3u8)(?:\?[^"'\s<>\\]*)?""",
    re.IGNORECASE,
)

# JSON in inline scripts escapes "/" as "\/" or "/"
ESCAPED_SLASH_RE = re.compile(r"\\/|\\u002[fF]")


def _meta_patterns(prop: str) -> List[re.Pattern]:
    attr = r"""(?:property|name)=["']""" + prop + r"""["']"""
    content = r"""content=["']([^"']+)["']"""
    return [
        re.compile(r"<meta[^>]*" + attr + r"[^>]*" + content, re.IGNORECASE),
        re.compile(r"<meta[^>]*" + content + r"[^>]*" + attr, re.IGNORECASE),
    ]


OG_IMAGE_PATTERNS = _meta_patterns(r"og:image")
OG_VIDEO_PATTERNS = _meta_patterns(r"og:video(?::url)?")
OG_TITLE_PATTERNS = _meta_patterns(r"og:title")


def _first_meta(html: str, patterns: List[re.Pattern]) -> str:
    for pattern in patterns:
        match = pattern.search(html)
        if match:
            return html_lib.unescape(match.group(1)).strip()
    return ""


def _absolute(url: str, base_url: Optional[str]) -> str:
    if url and base_url and not is_http_url(url):
        url = urljoin(base_url, url)
    return url if is_http_url(url) else ""


def extract_title(html: str) -> str:
    match = TITLE_RE.search(html)
    return html_lib.unescape(match.group(1)).strip() if match else ""


def extract_og_title(html: str) -> str:
    return _first_meta(html, OG_TITLE_PATTERNS)


def extract_og_image(html: str) -> str:
    return _first_meta(html, OG_IMAGE_PATTERNS)


def extract_og_video(html: str) -> str:
    return _first_meta(html, OG_VIDEO_PATTERNS)


def scan_media_links(html: str) -> List[str]:
    """Every distinct .mp4/.m3u8 URL, in order of first appearance"""
    text = ESCAPED_SLASH_RE.sub("/", html)
    seen = {}
    for match in MEDIA_LINK_RE.finditer(text):
        url = match.group(0).replace("&amp;", "&")
        seen.setdefault(url, None)
    return list(seen)


def extract_media(html: str, base_url: Optional[str] = None) -> ExtractedPage:
    """
    Title, cover image and media candidates of one page.

    og:video joins the direct-link set after the scan, so a URL found both
    ways is listed once. Raises NoMediaFound when neither media nor a cover
    image is present.
    """
    urls = scan_media_links(html)
    og_video = _absolute(extract_og_video(html), base_url)
    if og_video and og_video not in urls:
        urls.append(og_video)

    page = ExtractedPage(
        title=extract_title(html),
        cover_image_url=_absolute(extract_og_image(html), base_url),
        media=[MediaCandidate.from_url(u) for u in urls if is_http_url(u)],
    )
    if not page.media and not page.cover_image_url:
        raise NoMediaFound("no direct media found")
    return page
