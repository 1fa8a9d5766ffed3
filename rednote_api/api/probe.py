from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from rednote_api.api.deps import get_metadata_service, get_probe_service
from rednote_api.api.errors import error_json
from rednote_api.core.errors import InvalidInput, NetworkFailure, UpstreamFailure
from rednote_api.core.logging import log_error, log_info
from rednote_api.core.security import SecurityValidator, UrlValidationResult
from rednote_api.i18n import translator
from rednote_api.infra.rate_limit import rate_limiter
from rednote_api.models.request import ProbeRequest
from rednote_api.models.response import OgResponse, ProbeResponse
from rednote_api.services.metadata import MetadataService
from rednote_api.services.probe import ProbeService
from rednote_api.utils.locale import safe_url_for_log

router = APIRouter()

async def read_probe_request(request: Request) -> ProbeRequest:
    """Parse the JSON body; a missing, malformed or mistyped body means no URL"""
    try:
        return ProbeRequest.model_validate_json(await request.body())
    except ValidationError:
        return ProbeRequest()

@router.post(
    "/api/head",
    dependencies=[Depends(rate_limiter)],
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": ProbeRequest.model_json_schema()}},
            "required": True,
        }
    },
)
async def head_probe(
    request: Request,
    probe_request: ProbeRequest = Depends(read_probe_request),
    service: ProbeService = Depends(get_probe_service),
):
    """Check a media URL's content type before downloading it"""

    _ = translator(request.headers.get("accept-language"))

    validation_result = await SecurityValidator.validate_url(probe_request.url)
    if validation_result == UrlValidationResult.INVALID:
        return error_json(400, _("error.invalid_url"))
    if validation_result == UrlValidationResult.BLOCKED:
        return error_json(403, _("error.private_ip"))

    safe_url = safe_url_for_log(probe_request.url)
    log_info(request, _("log.probing", url=safe_url))

    try:
        result = await service.probe(probe_request.url)
    except InvalidInput:
        return error_json(400, _("error.invalid_url"))
    except UpstreamFailure as e:
        return error_json(400, _("error.upstream_status", status=e.upstream_status))
    except NetworkFailure as e:
        log_error(request, f"Probe failed for {safe_url}: {e.message}")
        return error_json(500, _("error.probe_failed"))
    except Exception as e:
        log_error(request, f"Probe error for {safe_url}: {str(e)}")
        return error_json(500, _("error.probe_failed"))

    response = ProbeResponse.from_result(result)
    if not result.ok:
        response.error = _("error.content_type_not_allowed", content_type=result.content_type or "-")
    return JSONResponse(content=response.to_wire())

@router.get("/api/og", dependencies=[Depends(rate_limiter)])
async def og_metadata(
    request: Request,
    url: Optional[str] = Query(None, description="Page URL"),
    service: MetadataService = Depends(get_metadata_service),
):
    """Open Graph title and image of a page"""

    _ = translator(request.headers.get("accept-language"))

    validation_result = await SecurityValidator.validate_url(url)
    if validation_result == UrlValidationResult.INVALID:
        return error_json(400, _("error.invalid_url"))
    if validation_result == UrlValidationResult.BLOCKED:
        return error_json(403, _("error.private_ip"))

    safe_url = safe_url_for_log(url)
    log_info(request, _("log.og_fetch", url=safe_url))

    try:
        metadata = await service.fetch(url)
    except InvalidInput:
        return error_json(400, _("error.invalid_url"))
    except UpstreamFailure as e:
        return error_json(400, _("error.upstream_status", status=e.upstream_status))
    except Exception as e:
        log_error(request, f"OG metadata error for {safe_url}: {str(e)}")
        return error_json(500, _("error.og_failed"))

    return OgResponse(title=metadata.title, image=metadata.image)
