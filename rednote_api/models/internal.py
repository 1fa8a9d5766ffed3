from pydantic import BaseModel, Field
from typing import List, Optional

HLS_MIME_TYPE = "application/x-mpegURL"
MP4_MIME_TYPE = "video/mp4"

class MediaCandidate(BaseModel):
    """Direct media URL found on a page"""
    url: str
    mime_type: str

    @classmethod
    def from_url(cls, url: str) -> "MediaCandidate":
        mime_type = HLS_MIME_TYPE if ".m3u8" in url.lower() else MP4_MIME_TYPE
        return cls(url=url, mime_type=mime_type)

class ExtractedPage(BaseModel):
    """What the extractors found in one HTML document"""
    title: str = ""
    cover_image_url: str = ""
    media: List[MediaCandidate] = Field(default_factory=list)

class ResolveResult(BaseModel):
    """Outcome of resolving one page URL"""
    ok: bool
    page_url: str = ""
    title: str = ""
    cover_image_url: str = ""
    media: List[MediaCandidate] = Field(default_factory=list)
    error: Optional[str] = None

class ProbeResult(BaseModel):
    """Content type check of a remote resource"""
    ok: bool
    content_type: str = ""
    content_length: Optional[int] = None
    error: Optional[str] = None

class DownloadRequest(BaseModel):
    """Download proxy intent (separated from HTTP concerns)"""
    source_url: str
    desired_filename: str = ""
    referer_url: Optional[str] = None

class OgMetadata(BaseModel):
    """Open Graph preview of a page"""
    title: str = ""
    image: str = ""
