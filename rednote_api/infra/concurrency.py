import logging
import uuid

from fastapi import Request

from rednote_api.config.settings import config
from rednote_api.core.errors import ServerBusy
from rednote_api.i18n import translator
from rednote_api.infra.redis import get_redis

logger = logging.getLogger(__name__)

COUNTER_KEY = "active_downloads_count"
# Upper bound on a single proxied download; stale slots expire after this
SLOT_TTL_SECONDS = 3600

ACQUIRE_SCRIPT = """
local current = tonumber(redis.call('GET', KEYS[1]) or "0")
if current >= tonumber(ARGV[1]) then
    return 0
end
redis.call('INCR', KEYS[1])
redis.call('EXPIRE', KEYS[1], tonumber(ARGV[3]))
redis.call('SETEX', KEYS[2], tonumber(ARGV[2]), "1")
return 1
"""

class ConcurrencyLimiter:
    """Caps simultaneous proxied downloads across workers"""

    async def __call__(self, request: Request):
        redis = get_redis()
        if not redis:
            return True

        slot_key = f"active_download:{uuid.uuid4()}"
        try:
            allowed = await redis.eval(
                ACQUIRE_SCRIPT,
                2,
                COUNTER_KEY,
                slot_key,
                config.download.max_concurrent,
                SLOT_TTL_SECONDS,
                SLOT_TTL_SECONDS * 2
            )
        except Exception as e:
            logger.warning(f"Concurrency limiter unavailable, allowing download: {e}")
            return True

        if not allowed:
            _ = translator(request.headers.get("accept-language"))
            raise ServerBusy(_("error.server_busy", max=config.download.max_concurrent))

        request.state.download_slot_key = slot_key
        return True

async def release_download_slot(request: Request):
    """Release the slot taken by ConcurrencyLimiter, if any"""
    slot_key = getattr(request.state, "download_slot_key", None)
    redis = get_redis()
    if not slot_key or not redis:
        return

    request.state.download_slot_key = None
    try:
        await redis.delete(slot_key)
        await redis.decr(COUNTER_KEY)
    except Exception as e:
        logger.warning(f"Failed to release download slot {slot_key}: {e}")

concurrency_limiter = ConcurrencyLimiter()
