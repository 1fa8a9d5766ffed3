from typing import Dict, Optional


class ResolverError(Exception):
    """Base for failures raised by the resolver services"""
    status_code = 500
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidInput(ResolverError):
    """Malformed or non-HTTP(S) URL"""
    status_code = 400


class NetworkFailure(ResolverError):
    """Upstream unreachable, timed out or stuck in a redirect loop"""
    status_code = 500


class UpstreamFailure(ResolverError):
    """Upstream answered with a non-success status"""
    status_code = 400

    def __init__(self, upstream_status: int, message: str = ""):
        super().__init__(message or f"upstream returned {upstream_status}")
        self.upstream_status = upstream_status


class DisallowedContentType(ResolverError):
    """Upstream content type is not an allowed media type"""
    status_code = 415

    def __init__(self, content_type: str):
        super().__init__(f"content type not allowed: {content_type or 'missing'}")
        self.content_type = content_type


class NoMediaFound(ResolverError):
    """Page was read but held no usable media or cover image"""
    status_code = 200


class RateLimited(ResolverError):
    """Client exhausted its request window"""
    status_code = 429

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after
        self.headers = {"Retry-After": str(retry_after)}


class ServerBusy(ResolverError):
    """Every download slot is taken"""
    status_code = 503
