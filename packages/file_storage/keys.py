"""
Object key generation.

Uploaded filenames are untrusted and may contain non-ASCII characters,
spaces or symbols that break S3 request signing. They are never used as
object keys; instead every upload gets a generated key of the form:

    prod_{timestamp_ms}_{ulid}{ext}

e.g. ``我的图片.png`` -> ``prod_1700000000000_01ARZ3NDEKTSV4RRFFQ69G5FAV.png``
"""

import os
import time

from ulid import ULID

KEY_PREFIX = "prod"
DEFAULT_EXTENSION = ".bin"


def _safe_extension(filename: str) -> str:
    """Extension of filename (with leading dot), reduced to ASCII alphanumerics."""
    _, ext = os.path.splitext(filename)
    if not ext:
        return ""
    cleaned = "".join(c for c in ext[1:] if c.isascii() and c.isalnum())
    return f".{cleaned}" if cleaned else ""


def generate_file_key(original_name: str | None) -> str:
    """
    Generate a safe, unique object key for a file.

    The original name only contributes its extension. Uniqueness comes from
    the ULID, so keys generated within the same millisecond never collide.

    Args:
        original_name: Caller-supplied filename (may be empty or None)

    Returns:
        Key containing only ``[A-Za-z0-9_.]``
    """
    ext = _safe_extension(original_name) if original_name else DEFAULT_EXTENSION
    timestamp = int(time.time() * 1000)
    return f"{KEY_PREFIX}_{timestamp}_{ULID()}{ext}"
