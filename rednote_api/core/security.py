import asyncio
import ipaddress
import socket
from enum import Enum, auto
from urllib.parse import urlparse

from rednote_api.config.settings import config
from rednote_api.infra.redis import get_redis
from rednote_api.utils.hash import hash_stable

SSRF_CACHE_TTL = 300
ALLOWED_SCHEMES = ("http", "https")


def is_http_url(value) -> bool:
    """True for an absolute http(s) URL with a host; never raises"""
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        parsed = urlparse(value.strip())
        # .port raises on a malformed port ("http://x:abc/")
        parsed.port
    except ValueError:
        return False
    return parsed.scheme.lower() in ALLOWED_SCHEMES and bool(parsed.hostname)


class UrlValidationResult(Enum):
    """URL validation result without throwing exceptions"""
    OK = auto()
    BLOCKED = auto()
    INVALID = auto()


class SecurityValidator:
    """
    Validate URL security without throwing exceptions.
    Returns result enum for separation of concerns.
    """

    @staticmethod
    async def validate_url(url: str) -> UrlValidationResult:
        """
        Validate URL syntax, then guard against SSRF.
        Uses async DNS resolution and Redis caching.
        """
        if not is_http_url(url):
            return UrlValidationResult.INVALID

        if not config.security.enable_ssrf_protection:
            return UrlValidationResult.OK

        try:
            hostname = urlparse(url.strip()).hostname

            # Check cache first
            redis = get_redis()
            cache_key = f"ssrf:{hash_stable(hostname)}"
            if redis:
                cached = await redis.get(cache_key)
                if cached == "ok":
                    return UrlValidationResult.OK
                if cached == "blocked":
                    return UrlValidationResult.BLOCKED

            # Async DNS resolution
            try:
                addr_info = await asyncio.to_thread(
                    socket.getaddrinfo,
                    hostname,
                    None
                )
                ips = [info[4][0] for info in addr_info]
            except socket.gaierror:
                # DNS failed - the fetch itself will report it
                if redis:
                    await redis.setex(cache_key, SSRF_CACHE_TTL, "ok")
                return UrlValidationResult.OK

            is_blocked = False
            for ip_str in ips:
                try:
                    ip = ipaddress.ip_address(ip_str.split("%", 1)[0])
                except ValueError:
                    return UrlValidationResult.INVALID

                if ip.is_loopback:
                    if not config.security.allow_localhost:
                        is_blocked = True
                        break
                    continue

                if not config.security.allow_private_ips and ip.is_private:
                    is_blocked = True
                    break

                if ip.is_link_local or ip.is_multicast:
                    is_blocked = True
                    break

            if redis:
                await redis.setex(
                    cache_key,
                    SSRF_CACHE_TTL,
                    "blocked" if is_blocked else "ok"
                )

            return UrlValidationResult.BLOCKED if is_blocked else UrlValidationResult.OK

        except Exception:
            return UrlValidationResult.INVALID
