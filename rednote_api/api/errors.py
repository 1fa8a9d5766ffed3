from typing import Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse

from rednote_api.core.errors import ResolverError
from rednote_api.models.response import ErrorResponse

# Endpoints whose errors are plain text rather than {ok:false, error}
PLAIN_TEXT_PATHS = {"/api/download", "/health"}

def error_json(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers
    )

async def resolver_error_handler(request: Request, exc: ResolverError):
    """Errors raised before an endpoint body runs (limiters), in that endpoint's error shape"""
    if request.url.path in PLAIN_TEXT_PATHS:
        return PlainTextResponse(exc.message, status_code=exc.status_code, headers=exc.headers)
    return error_json(exc.status_code, exc.message, exc.headers)
