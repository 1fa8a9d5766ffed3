from typing import Optional
import redis.asyncio as aioredis
from rich.console import Console
from rednote_api.config.settings import config
from rednote_api.core.state import state

console = Console()

async def init_redis() -> Optional[aioredis.Redis]:
    """Connect to Redis when configured; the service runs without it"""
    if not config.redis.url:
        console.print("[dim]Redis not configured, rate limiting disabled[/dim]")
        return None

    try:
        redis_client = aioredis.from_url(
            config.redis.url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=config.redis.socket_timeout
        )
        await redis_client.ping()
        
        # Recover active downloads counter
        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = await redis_client.scan(
                cursor,
                match="active_download:*",
                count=100
            )
            keys.extend(partial_keys)
            if cursor == 0:
                break
        
        await redis_client.set("active_downloads_count", len(keys))
        
        if len(keys) > 0:
            console.print(f"[yellow]✓ Redis connected (recovered {len(keys)} active downloads)[/yellow]")
        else:
            console.print("[green]✓ Redis connected[/green]")
        return redis_client
        
    except Exception as e:
        console.print(f"[yellow]⚠ Redis connection failed: {str(e)}[/yellow]")
        return None

def get_redis() -> Optional[aioredis.Redis]:
    """Get Redis client from state"""
    return state.redis

async def close_redis() -> None:
    """Close Redis connection"""
    if state.redis:
        await state.redis.aclose()
        state.redis = None
        console.print("[dim]✓ Redis connection closed[/dim]")
