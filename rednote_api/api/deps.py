from fastapi import Depends

from rednote_api.config.settings import config
from rednote_api.core.state import state
from rednote_api.services.download import DownloadService
from rednote_api.services.fetcher import RemoteFetcher, build_client
from rednote_api.services.metadata import MetadataService
from rednote_api.services.probe import ProbeService
from rednote_api.services.resolver import ResolverService


def get_http_client():
    """Shared client created at startup (lazily outside the app lifecycle)"""
    if state.http_client is None:
        state.http_client = build_client(config.fetch.timeout_seconds, config.fetch.max_redirects)
    return state.http_client


def get_fetcher(client=Depends(get_http_client)) -> RemoteFetcher:
    return RemoteFetcher(client, config.request_ua, max_text_bytes=config.fetch.max_page_bytes)


def get_resolver(fetcher: RemoteFetcher = Depends(get_fetcher)) -> ResolverService:
    return ResolverService(fetcher, config.fetch.accept_language)


def get_metadata_service(fetcher: RemoteFetcher = Depends(get_fetcher)) -> MetadataService:
    return MetadataService(fetcher, config.fetch.accept_language)


def get_probe_service(fetcher: RemoteFetcher = Depends(get_fetcher)) -> ProbeService:
    return ProbeService(fetcher)


def get_download_service(fetcher: RemoteFetcher = Depends(get_fetcher)) -> DownloadService:
    return DownloadService(
        fetcher,
        chunk_size=config.download.chunk_size,
        enforce_content_type=config.download.enforce_content_type,
        default_filename=config.download.default_filename,
    )
