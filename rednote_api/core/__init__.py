from .errors import (
    DisallowedContentType,
    InvalidInput,
    NetworkFailure,
    NoMediaFound,
    RateLimited,
    ResolverError,
    ServerBusy,
    UpstreamFailure,
)

__all__ = [
    "DisallowedContentType",
    "InvalidInput",
    "NetworkFailure",
    "NoMediaFound",
    "RateLimited",
    "ResolverError",
    "ServerBusy",
    "UpstreamFailure",
]
