import pytest

from rednote_api.services.content_type import extension_for, is_allowed_media_type, media_type_of


@pytest.mark.parametrize("content_type", [
    "video/mp4",
    "video/mp4; charset=binary",
    "VIDEO/MP4",
    "video/webm",
    "video/x-matroska",
    "audio/mpeg",
    "audio/wav",
    "image/jpeg",
    "image/webp",
    "application/octet-stream",
    "application/vnd.apple.mpegurl",
    "application/x-mpegURL",
    "  audio/ogg ;codecs=opus",
])
def test_media_types_pass_the_gate(content_type):
    assert is_allowed_media_type(content_type) is True


@pytest.mark.parametrize("content_type", [
    "",
    None,
    "text/html",
    "text/html; charset=utf-8",
    "application/json",
    "image/svg+xml",
    "video",
    "; charset=binary",
])
def test_other_types_are_rejected(content_type):
    assert is_allowed_media_type(content_type) is False


def test_media_type_of_strips_parameters():
    assert media_type_of("Video/MP4; charset=binary") == "video/mp4"
    assert media_type_of(None) == ""


@pytest.mark.parametrize("content_type,url,expected", [
    ("video/mp4", "https://x.test/v", "mp4"),
    ("image/jpeg; q=1", "https://x.test/c", "jpeg"),
    ("application/vnd.apple.mpegurl", "https://x.test/p", "m3u8"),
    ("application/x-mpegURL", "https://x.test/p", "m3u8"),
    ("video/x-matroska", "https://x.test/v", "mkv"),
    ("", "https://x.test/live/index.m3u8?token=1", "m3u8"),
    ("", "https://x.test/blob", "bin"),
    ("application/octet-stream", "https://x.test/blob", "bin"),
    ("application/octet-stream", "https://x.test/list.m3u8", "m3u8"),
])
def test_extension_for(content_type, url, expected):
    assert extension_for(content_type, url) == expected
