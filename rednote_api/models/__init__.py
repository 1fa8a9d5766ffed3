from .internal import DownloadRequest, MediaCandidate, OgMetadata, ProbeResult, ResolveResult
from .request import ProbeRequest
from .response import ErrorResponse, MediaItem, OgResponse, ProbeResponse, ResolveResponse

__all__ = [
    "DownloadRequest",
    "ErrorResponse",
    "MediaCandidate",
    "MediaItem",
    "OgMetadata",
    "OgResponse",
    "ProbeRequest",
    "ProbeResponse",
    "ProbeResult",
    "ResolveResponse",
    "ResolveResult",
]
