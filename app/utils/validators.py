"""
Request validators for uploads
"""
from typing import Optional
from uuid import UUID
import mimetypes
import re

from python_multipart.multipart import parse_options_header

_TOKEN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_QUOTED = r'"(?:[^"\\\r\n]|\\.)*"'
_MEDIA_TYPE = re.compile(
    rf"^\s*{_TOKEN}/{_TOKEN}"
    rf"(?:\s*;\s*{_TOKEN}\s*=\s*(?:{_TOKEN}|{_QUOTED}))*"
    r"\s*;?\s*$"
)


def parse_video_id(value: str) -> Optional[UUID]:
    """Parse a path parameter as a UUID, None if malformed"""
    try:
        return UUID(value)
    except (ValueError, AttributeError, TypeError):
        return None


def parse_media_type(content_type: Optional[str]) -> Optional[str]:
    """
    Parse a Content-Type header value
    - type and subtype must be tokens
    - every parameter must be token=token or token="quoted string"
    Returns the lowercased media type without parameters, or None if malformed
    """
    if not content_type or not _MEDIA_TYPE.match(content_type):
        return None
    media_type, _ = parse_options_header(content_type)
    return media_type.decode("latin-1").strip().lower()


def extension_for_content_type(content_type: Optional[str]) -> Optional[str]:
    """Look up a file extension (with leading dot) for a MIME type"""
    media_type = parse_media_type(content_type)
    if media_type is None:
        return None
    return mimetypes.guess_extension(media_type)
