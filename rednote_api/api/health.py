from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from rednote_api.i18n import i18n

router = APIRouter()


@router.get("/health", response_class=PlainTextResponse)
async def health_check():
    """Lightweight health check"""
    return i18n.get("health.status")
