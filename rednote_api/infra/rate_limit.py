import logging

from fastapi import Request

from rednote_api.config.settings import config
from rednote_api.core.errors import RateLimited
from rednote_api.i18n import translator
from rednote_api.infra.redis import get_redis

logger = logging.getLogger(__name__)

# Fixed window counter; returns {allowed, ttl}
RATE_LIMIT_SCRIPT = """
local current = redis.call('INCR', KEYS[1])
if current == 1 then
    redis.call('EXPIRE', KEYS[1], tonumber(ARGV[2]))
end
if current > tonumber(ARGV[1]) then
    return {0, redis.call('TTL', KEYS[1])}
end
return {1, 0}
"""

class RedisRateLimiter:
    """Per-client, per-path request limit; open when Redis is absent"""

    async def __call__(self, request: Request):
        if not config.rate_limit.enabled:
            return True

        redis = get_redis()
        if not redis:
            return True

        client_ip = request.client.host if request.client else "unknown"
        key = f"rate:{client_ip}:{request.url.path}"

        try:
            allowed, ttl = await redis.eval(
                RATE_LIMIT_SCRIPT,
                1,
                key,
                config.rate_limit.max_requests,
                config.rate_limit.window_seconds
            )
        except Exception as e:
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")
            return True

        if not allowed:
            _ = translator(request.headers.get("accept-language"))
            raise RateLimited(_("error.rate_limit", seconds=ttl), retry_after=ttl)
        return True

rate_limiter = RedisRateLimiter()
