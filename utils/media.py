# backend/utils/media.py
import re
from typing import Optional

MAX_FIELD_LENGTH = 200

_UNSAFE_CHARS = re.compile(r"[\x00-\x1f<>]")

# (fragmento de MIME, extensión); el orden importa
_MIME_EXTENSIONS = (
    ("audio/mpeg", "mp3"),
    ("audio/wav", "wav"),
    ("audio/ogg", "ogg"),
    ("image/png", "png"),
    ("image/jpeg", "jpg"),
    ("image/webp", "webp"),
    ("image/svg+xml", "svg"),
)


def sanitize(value) -> str:
    """Quita caracteres de control y < >, corta a 200. No-strings -> ''."""
    if not isinstance(value, str):
        return ""
    return _UNSAFE_CHARS.sub("", value)[:MAX_FIELD_LENGTH]


def pick_ext(mime: Optional[str]) -> Optional[str]:
    if not mime:
        return None
    for fragment, ext in _MIME_EXTENSIONS:
        if fragment in mime:
            return ext
    return None


def join_url(base: str, key: str) -> str:
    return base + key if base.endswith("/") else base + "/" + key
