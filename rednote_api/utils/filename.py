import re
import unicodedata
from urllib.parse import quote

WINDOWS_RESERVED = {
    'CON', 'PRN', 'AUX', 'NUL',
    'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
    'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
}


def sanitize_filename(name: str, max_length: int = 200, default: str = "download") -> str:
    """Sanitize filename for cross-platform and header safety"""
    if not name:
        return default
    name = unicodedata.normalize("NFKC", name)
    name = re.sub(r'[\x00-\x1f\x7f]', '', name)
    name = re.sub(r'[\\/:*?"<>|]', '_', name)
    # No ".." left anywhere, no hidden/relative names
    name = re.sub(r'\.{2,}', '.', name)
    name = name.strip().lstrip('.').rstrip('. ')

    if name.split('.', 1)[0].upper() in WINDOWS_RESERVED:
        name = f"_{name}"

    name = name[:max_length].strip().rstrip('.')
    return name or default


def content_disposition(filename: str) -> str:
    """Attachment header value; adds an RFC 5987 form for non-ASCII names"""
    ascii_name = filename.encode("ascii", "ignore").decode("ascii").replace('"', '').strip()
    if not ascii_name or ascii_name.startswith("."):
        ascii_name = f"download{ascii_name}"
    if ascii_name == filename:
        return f'attachment; filename="{ascii_name}"'
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
