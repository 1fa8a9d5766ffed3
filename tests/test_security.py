import pytest

from rednote_api.config.settings import config
from rednote_api.core.security import SecurityValidator, UrlValidationResult, is_http_url


@pytest.mark.parametrize("value", [
    "http://example.com",
    "https://example.com/path?q=1#frag",
    "HTTPS://EXAMPLE.COM/",
    "http://127.0.0.1:8080/x",
    "https://[::1]/",
    "  https://example.com/padded  ",
])
def test_http_urls_are_valid(value):
    assert is_http_url(value) is True


@pytest.mark.parametrize("value", [
    None,
    "",
    "   ",
    42,
    "example.com",
    "/relative/path",
    "//example.com/no-scheme",
    "ftp://example.com/file",
    "file:///etc/passwd",
    "data:text/html,<b>x</b>",
    "javascript:alert(1)",
    "http://",
    "https:///path-only",
    "http://example.com:notaport/",
    "http://[::1/",
])
def test_non_http_or_malformed_urls_are_rejected(value):
    assert is_http_url(value) is False


@pytest.mark.asyncio
async def test_validator_reports_invalid_syntax():
    assert await SecurityValidator.validate_url("file:///etc/passwd") == UrlValidationResult.INVALID


@pytest.mark.asyncio
async def test_validator_passes_everything_valid_when_guard_disabled():
    assert await SecurityValidator.validate_url("http://127.0.0.1/") == UrlValidationResult.OK


@pytest.mark.asyncio
@pytest.mark.parametrize("url", [
    "http://127.0.0.1/health",
    "http://10.0.0.5/",
    "http://192.168.1.1/admin",
    "http://169.254.169.254/latest/meta-data",
])
async def test_guard_blocks_local_and_private_targets(monkeypatch, url):
    monkeypatch.setattr(config.security, "enable_ssrf_protection", True)
    assert await SecurityValidator.validate_url(url) == UrlValidationResult.BLOCKED


@pytest.mark.asyncio
async def test_guard_allows_public_address(monkeypatch):
    monkeypatch.setattr(config.security, "enable_ssrf_protection", True)
    assert await SecurityValidator.validate_url("http://93.184.216.34/") == UrlValidationResult.OK


@pytest.mark.asyncio
async def test_guard_respects_allow_localhost(monkeypatch):
    monkeypatch.setattr(config.security, "enable_ssrf_protection", True)
    monkeypatch.setattr(config.security, "allow_localhost", True)
    assert await SecurityValidator.validate_url("http://127.0.0.1/") == UrlValidationResult.OK
