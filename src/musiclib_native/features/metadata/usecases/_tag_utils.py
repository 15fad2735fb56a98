"""Tag utility helpers.

Where: src/musiclib_native/features/metadata/usecases/_tag_utils.py
What: Pure helpers normalizing raw tag values into record field values.
Why: Keep per-field validation rules in one place shared by every backend.
"""

from __future__ import annotations

import math
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

__all__ = [
    "first_text",
    "clean_text",
    "parse_year",
    "duration_to_ms",
    "artwork_bytes",
    "location_to_path",
]


def first_text(value: object) -> str | None:
    """Return the first textual element of a raw tag value.

    Handles plain strings, lists/tuples of values (mutagen's usual shape)
    and frame-like objects exposing a ``text`` attribute.
    """
    if value is None:
        return None
    if hasattr(value, "text") and not isinstance(value, str):
        return first_text(getattr(value, "text"))
    if isinstance(value, (list, tuple)):
        for element in value:
            text = first_text(element)
            if text is not None:
                return text
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def clean_text(value: object) -> str | None:
    """Normalize a textual tag into a trimmed optional string."""
    text = first_text(value)
    if text is None:
        return None
    text = text.strip()
    return text or None


def parse_year(value: object) -> int | None:
    """Parse a year from a tag value (the first 4 characters must be digits).

    Integers are read through their decimal form, so ``2006`` parses and
    ``95`` does not.
    """
    if isinstance(value, bool):
        return None
    date_str = clean_text(value)
    if not date_str or len(date_str) < 4:
        return None
    prefix = date_str[:4]
    if not (prefix.isascii() and prefix.isdigit()):
        return None
    return int(prefix)


def duration_to_ms(seconds: object) -> int | None:
    """Convert a duration in seconds to whole milliseconds.

    Non-numeric, non-finite, zero and negative values yield None.
    """
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        return None
    value = float(seconds)
    if not math.isfinite(value) or value <= 0:
        return None
    millis = int(round(value * 1000.0))
    return millis if millis > 0 else None


def artwork_bytes(value: object) -> bytes | None:
    """Return raw image bytes from a picture-like value, or None if empty."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        for element in value:
            data = artwork_bytes(element)
            if data:
                return data
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        data = bytes(value)
    elif hasattr(value, "data"):
        return artwork_bytes(getattr(value, "data"))
    else:
        return None
    return data or None


def location_to_path(location: str) -> str:
    """Turn a local path or ``file://`` URL into a filesystem path."""
    stripped = location.strip()
    if stripped.lower().startswith("file://"):
        parsed = urlparse(stripped)
        return url2pathname(parsed.path)
    return str(Path(location).expanduser())
