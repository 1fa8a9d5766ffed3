from fastapi import Request
import logging
import time
import uuid
from typing import Any
from rich.logging import RichHandler
from starlette.middleware.base import BaseHTTPMiddleware

from rednote_api.config.settings import config

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("rednote_api.access")

def setup_logging() -> None:
    """Configure root logging once, rich console when enabled"""
    if config.logging.enable_rich:
        handler: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(config.logging.format))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(config.logging.level)
    # httpx logs every outbound request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log its outcome"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            access_logger.exception(
                "%s %s failed", request.method, request.url.path,
                extra={"request_id": request_id}
            )
            raise
        elapsed_ms = (time.perf_counter() - started) * 1000
        access_logger.info(
            "[%s] %s %s -> %d (%.1f ms)",
            request_id, request.method, request.url.path, response.status_code, elapsed_ms,
            extra={"request_id": request_id}
        )
        response.headers["X-Request-ID"] = request_id
        return response

def log_with_context(
    request: Request,
    level: int,
    message: str,
    **kwargs: Any
) -> None:
    """
    Log with request context.
    Automatically includes request_id for tracing.
    """
    request_id = getattr(request.state, "request_id", "unknown")
    extra = {
        "request_id": request_id,
        **kwargs
    }
    logger.log(level, f"[{request_id}] {message}", extra=extra)

def log_info(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.INFO, message, **kwargs)

def log_error(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.ERROR, message, **kwargs)

def log_warning(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.WARNING, message, **kwargs)