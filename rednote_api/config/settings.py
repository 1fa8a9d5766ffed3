from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

DEFAULT_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

class RedisConfig(BaseModel):
    url: Optional[str] = Field(default=None, description="Redis connection URL (disabled when unset)")
    socket_timeout: int = Field(default=5, description="Redis socket timeout in seconds")

class RateLimitConfig(BaseModel):
    enabled: bool = Field(default=True, description="Enable rate limiting")
    max_requests: int = Field(default=30, ge=1, description="Max requests per window")
    window_seconds: int = Field(default=60, ge=1, description="Rate limit window in seconds")

class FetchConfig(BaseModel):
    timeout_seconds: float = Field(default=20.0, gt=0, description="Per-request upstream timeout in seconds")
    max_redirects: int = Field(default=20, ge=0, description="Max redirects followed per request")
    accept_language: str = Field(default="id,en;q=0.9", description="Accept-Language sent when reading pages")
    max_page_bytes: int = Field(default=5 * 1024 * 1024, ge=1024, description="Max bytes read from a page before extraction")

class DownloadConfig(BaseModel):
    max_concurrent: int = Field(default=10, ge=1, le=100, description="Max concurrent downloads")
    chunk_size: int = Field(default=64 * 1024, ge=1024, description="Streaming chunk size in bytes")
    enforce_content_type: bool = Field(default=True, description="Reject non-media upstream content types")
    default_filename: str = Field(default="download", description="Filename used when sanitizing yields nothing")

class KeepaliveConfig(BaseModel):
    interval_seconds: int = Field(default=240, ge=1, description="Self-ping interval in seconds")

class SecurityConfig(BaseModel):
    enable_ssrf_protection: bool = Field(default=True, description="Enable SSRF protection")
    allow_private_ips: bool = Field(default=False, description="Allow private IP ranges")
    allow_localhost: bool = Field(default=False, description="Allow localhost access")

class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="%(asctime)s %(levelname)s %(name)s: %(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @field_validator('level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

class I18nConfig(BaseModel):
    default_locale: str = Field(default="en", description="Default locale")
    supported_locales: list = Field(default=["en", "id"], description="Supported locales")

class ApiConfig(BaseModel):
    title: str = Field(default="Rednote Resolver API", description="API title")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    static_dir: str = Field(default="public", description="Frontend bundle directory")
    debug: bool = Field(default=False, description="Enable debug mode")

class Config(BaseSettings):
    """Service configuration, read once from the environment (and .env)"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    port: int = Field(default=5000, description="Listen port")
    request_ua: str = Field(default=DEFAULT_UA, description="Outbound User-Agent")
    self_url: Optional[str] = Field(default=None, description="Keepalive target base URL")

    redis: RedisConfig = Field(default_factory=RedisConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    keepalive: KeepaliveConfig = Field(default_factory=KeepaliveConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

config = Config()
