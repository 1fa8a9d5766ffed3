import asyncio
import logging
import os
from contextlib import suppress
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from rich.console import Console
from rednote_api.api import download, health, probe, resolve
from rednote_api.api.deps import get_http_client
from rednote_api.api.errors import resolver_error_handler
from rednote_api.config.settings import config
from rednote_api.core.errors import ResolverError
from rednote_api.core.logging import RequestLoggingMiddleware, setup_logging
from rednote_api.core.state import state
from rednote_api.infra.redis import init_redis, close_redis
from rednote_api.services.keepalive import start_keepalive

setup_logging()
logger = logging.getLogger(__name__)
console = Console()

app = FastAPI(
    title=config.api.title,
    version=config.api.version,
    docs_url="/docs" if config.api.debug else None,
    redoc_url=None
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)
app.add_exception_handler(ResolverError, resolver_error_handler)

# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(resolve.router, tags=["Resolve"])
app.include_router(download.router, tags=["Download"])
app.include_router(probe.router, tags=["Probe"])

# Frontend bundle last so it never shadows the API
if os.path.isdir(config.api.static_dir):
    app.mount("/", StaticFiles(directory=config.api.static_dir, html=True), name="static")

@app.on_event("startup")
async def startup_event():
    state.redis = await init_redis()
    client = get_http_client()
    state.keepalive_task = start_keepalive(client, config.self_url, config.keepalive.interval_seconds)
    console.print(f"[green]✓ {config.api.title} running on port {config.port}[/green]")

@app.on_event("shutdown")
async def shutdown_event():
    if state.keepalive_task:
        state.keepalive_task.cancel()
        with suppress(asyncio.CancelledError):
            await state.keepalive_task
        state.keepalive_task = None
    if state.http_client:
        await state.http_client.aclose()
        state.http_client = None
    await close_redis()

def run():
    """Console entry point"""
    import uvicorn
    uvicorn.run("rednote_api.main:app", host="0.0.0.0", port=config.port, log_config=None)

if __name__ == "__main__":
    run()
