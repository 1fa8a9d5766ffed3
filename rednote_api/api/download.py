from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask

from rednote_api.api.deps import get_download_service
from rednote_api.core.errors import DisallowedContentType, InvalidInput, NetworkFailure, UpstreamFailure
from rednote_api.core.logging import log_error, log_info, log_warning
from rednote_api.core.security import SecurityValidator, UrlValidationResult
from rednote_api.i18n import translator
from rednote_api.infra.concurrency import concurrency_limiter, release_download_slot
from rednote_api.infra.rate_limit import rate_limiter
from rednote_api.models.internal import DownloadRequest
from rednote_api.services.download import DownloadService
from rednote_api.utils.locale import safe_url_for_log

router = APIRouter()

@router.get("/api/download", dependencies=[Depends(rate_limiter), Depends(concurrency_limiter)])
async def download_media(
    request: Request,
    url: Optional[str] = Query(None, description="Direct media URL"),
    filename: Optional[str] = Query(None, description="Desired file name, without extension"),
    referer: Optional[str] = Query(None, description="Referer sent upstream"),
    service: DownloadService = Depends(get_download_service),
):
    """Proxy a media file back as an attachment"""

    _ = translator(request.headers.get("accept-language"))

    validation_result = await SecurityValidator.validate_url(url)
    if validation_result != UrlValidationResult.OK:
        await release_download_slot(request)
        if validation_result == UrlValidationResult.BLOCKED:
            return PlainTextResponse(_("error.private_ip"), status_code=403)
        return PlainTextResponse(_("error.invalid_url"), status_code=400)

    download_request = DownloadRequest(source_url=url, desired_filename=filename or "", referer_url=referer)
    safe_url = safe_url_for_log(url)

    try:
        stream, headers, media_type = await service.open(download_request)
    except InvalidInput:
        await release_download_slot(request)
        return PlainTextResponse(_("error.invalid_url"), status_code=400)
    except UpstreamFailure as e:
        await release_download_slot(request)
        log_warning(request, f"Upstream {e.upstream_status} for {safe_url}")
        return PlainTextResponse(_("error.download_failed", status=e.upstream_status), status_code=400)
    except DisallowedContentType as e:
        await release_download_slot(request)
        log_warning(request, f"Refused {e.content_type or 'untyped'} content from {safe_url}")
        return PlainTextResponse(
            _("error.content_type_not_allowed", content_type=e.content_type or "-"),
            status_code=415
        )
    except NetworkFailure as e:
        await release_download_slot(request)
        log_error(request, f"Download fetch failed for {safe_url}: {e.message}")
        return PlainTextResponse(_("error.download_server_error"), status_code=500)
    except Exception as e:
        await release_download_slot(request)
        log_error(request, f"Download error for {safe_url}: {str(e)}")
        return PlainTextResponse(_("error.download_server_error"), status_code=500)

    log_info(request, _("log.downloading", url=safe_url, filename=headers["Content-Disposition"]))

    async def finish():
        await stream.aclose()
        await release_download_slot(request)

    async def wrapped_generator():
        try:
            async for chunk in stream:
                yield chunk
        finally:
            await finish()

    # The background task also covers a response whose body is never iterated
    return StreamingResponse(
        wrapped_generator(),
        media_type=media_type,
        headers=headers,
        background=BackgroundTask(finish)
    )
