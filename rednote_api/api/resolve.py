from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from rednote_api.api.deps import get_resolver
from rednote_api.api.errors import error_json
from rednote_api.core.errors import InvalidInput, NetworkFailure
from rednote_api.core.logging import log_error, log_info, log_warning
from rednote_api.core.security import SecurityValidator, UrlValidationResult
from rednote_api.i18n import translator
from rednote_api.infra.rate_limit import rate_limiter
from rednote_api.models.response import ErrorResponse, ResolveResponse
from rednote_api.services.resolver import ResolverService
from rednote_api.utils.locale import safe_url_for_log

router = APIRouter()

@router.get("/api/resolve/rednote", dependencies=[Depends(rate_limiter)])
async def resolve_rednote(
    request: Request,
    url: Optional[str] = Query(None, description="Post URL"),
    resolver: ResolverService = Depends(get_resolver),
):
    """Resolve a post URL into direct media candidates"""

    _ = translator(request.headers.get("accept-language"))

    validation_result = await SecurityValidator.validate_url(url)
    if validation_result == UrlValidationResult.INVALID:
        return error_json(400, _("error.invalid_url"))
    if validation_result == UrlValidationResult.BLOCKED:
        return error_json(403, _("error.private_ip"))

    safe_url = safe_url_for_log(url)
    log_info(request, _("log.resolving", url=safe_url))

    try:
        result = await resolver.resolve(url)
    except InvalidInput:
        return error_json(400, _("error.invalid_url"))
    except NetworkFailure as e:
        log_error(request, f"Resolve fetch failed for {safe_url}: {e.message}")
        return error_json(500, _("error.fetch_page_failed"))
    except Exception as e:
        log_error(request, f"Resolve error for {safe_url}: {str(e)}")
        return error_json(500, _("error.fetch_page_failed"))

    if not result.ok:
        log_warning(request, _("log.no_media", url=safe_url))
        return ErrorResponse(error=_("error.no_media_found"))

    log_info(request, _("log.resolved", url=safe_url, count=len(result.media)))
    return ResolveResponse.from_result(result)
