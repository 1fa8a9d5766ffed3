import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


async def keepalive_loop(client: httpx.AsyncClient, base_url: str, interval_seconds: float) -> None:
    """Ping base_url/health forever; failures are logged and dropped"""
    target = base_url.rstrip("/") + "/health"
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            resp = await client.get(target)
            logger.debug(f"Keepalive {target} -> {resp.status_code}")
        except Exception as e:
            logger.debug(f"Keepalive {target} failed: {e}")


def start_keepalive(client: httpx.AsyncClient, base_url: Optional[str], interval_seconds: float) -> Optional[asyncio.Task]:
    """Schedule the self-ping task when a target is configured"""
    if not base_url:
        return None
    logger.info(f"Keepalive enabled: {base_url} every {interval_seconds}s")
    return asyncio.create_task(keepalive_loop(client, base_url, interval_seconds), name="keepalive")
