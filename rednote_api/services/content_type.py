import re
from typing import Optional

HLS_CONTENT_TYPES = frozenset({
    "application/vnd.apple.mpegurl",
    "application/x-mpegurl",
    "audio/mpegurl",
    "audio/x-mpegurl",
})

ALLOWED_MEDIA_TYPES = frozenset({
    "video/mp4",
    "video/webm",
    "video/ogg",
    "video/x-matroska",
    "audio/mpeg",
    "audio/ogg",
    "audio/aac",
    "audio/wav",
    "audio/x-wav",
    "audio/webm",
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
    "application/octet-stream",
}) | HLS_CONTENT_TYPES

_SUBTYPE_WORD = re.compile(r"/(\w+)")

# Subtypes whose first word is not a usable extension
EXTENSION_OVERRIDES = {
    "video/x-matroska": "mkv",
    "audio/x-wav": "wav",
}
GENERIC_BINARY = "application/octet-stream"


def media_type_of(content_type: Optional[str]) -> str:
    """'Video/MP4; charset=binary' -> 'video/mp4'"""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def is_allowed_media_type(content_type: Optional[str]) -> bool:
    """Allowlist check; missing or empty types fail closed"""
    media_type = media_type_of(content_type)
    return bool(media_type) and media_type in ALLOWED_MEDIA_TYPES


def extension_for(content_type: Optional[str], source_url: str) -> str:
    """File extension from the declared type, else from the source URL"""
    media_type = media_type_of(content_type)
    if media_type in HLS_CONTENT_TYPES:
        return "m3u8"
    if media_type in EXTENSION_OVERRIDES:
        return EXTENSION_OVERRIDES[media_type]
    match = _SUBTYPE_WORD.search(media_type)
    if match and media_type != GENERIC_BINARY:
        return match.group(1).lower()
    return "m3u8" if ".m3u8" in source_url.lower() else "bin"
