from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from rednote_api.models.internal import MediaCandidate, ProbeResult, ResolveResult


class MediaItem(BaseModel):
    """Single media entry of a resolve response"""
    url: str
    type: str

    @classmethod
    def from_candidate(cls, candidate: MediaCandidate) -> "MediaItem":
        return cls(url=candidate.url, type=candidate.mime_type)


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str


class ResolveResponse(BaseModel):
    """Resolve success response"""
    ok: bool = True
    page: str
    title: str = ""
    cover: str = ""
    media: List[MediaItem] = []

    @classmethod
    def from_result(cls, result: ResolveResult) -> "ResolveResponse":
        return cls(
            page=result.page_url,
            title=result.title,
            cover=result.cover_image_url,
            media=[MediaItem.from_candidate(c) for c in result.media],
        )


class ProbeResponse(BaseModel):
    """HEAD probe response (camelCase on the wire)"""
    model_config = ConfigDict(populate_by_name=True)

    ok: bool
    content_type: Optional[str] = Field(None, serialization_alias="contentType")
    content_length: Optional[int] = Field(None, serialization_alias="contentLength")
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: ProbeResult) -> "ProbeResponse":
        return cls(
            ok=result.ok,
            content_type=result.content_type or None,
            content_length=result.content_length,
            error=result.error,
        )

    def to_wire(self) -> dict:
        data = self.model_dump(by_alias=True)
        if self.ok:
            # Success shape always carries both fields
            data.pop("error")
            return data
        return {k: v for k, v in data.items() if v is not None}


class OgResponse(BaseModel):
    ok: bool = True
    title: str = ""
    image: str = ""
