"""Normalization of upload content into bytes."""

import base64
import binascii
import inspect
import re
from typing import Any, Literal

from packages.file_storage.exceptions import InvalidInputError

ContentEncoding = Literal["base64", "binary", "utf-8"]

# Heuristic only: text made entirely of base64 characters is decoded as base64.
BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/]+=*$")


def _encode_binary(text: str) -> bytes:
    # One byte per character, keeping the low 8 bits
    return bytes(ord(c) & 0xFF for c in text)


def _decode_base64(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.b64decode(padded)


def _unsupported(content: Any) -> InvalidInputError:
    return InvalidInputError(
        f"Unsupported content type: {type(content).__name__}",
        field="content",
    )


def _read_file_like(content: Any) -> bytes:
    data = content.read()
    if inspect.isawaitable(data):
        # Async readers (e.g. UploadFile) must be read by the caller first
        if inspect.iscoroutine(data):
            data.close()
        raise InvalidInputError(
            f"Content with an async read() must be read before upload: {type(content).__name__}",
            field="content",
        )
    if isinstance(data, str):
        return data.encode("utf-8")
    try:
        return bytes(data)
    except (TypeError, ValueError) as e:
        raise _unsupported(content) from e


def _decode_str(content: str, encoding: ContentEncoding | None) -> bytes:
    if encoding == "utf-8":
        return content.encode("utf-8")
    if encoding == "binary":
        return _encode_binary(content)
    if encoding == "base64":
        try:
            return _decode_base64(content)
        except binascii.Error as e:
            raise InvalidInputError(f"Invalid base64 content: {e}", field="content") from e

    if BASE64_PATTERN.fullmatch(content):
        try:
            return _decode_base64(content)
        except binascii.Error:
            pass
    return _encode_binary(content)


def normalize_content(
    content: Any,
    encoding: ContentEncoding | None = None,
) -> bytes:
    """
    Convert upload content to bytes.

    Accepts bytes-like objects, strings (base64 or binary), readable
    file-like objects and iterables of ints.

    Args:
        content: Raw upload content
        encoding: Explicit encoding of string content; skips base64 detection

    Returns:
        Content as bytes

    Raises:
        InvalidInputError: If content cannot be converted
    """
    if content is None:
        return b""
    if isinstance(content, bytes):
        return content
    if isinstance(content, (bytearray, memoryview)):
        return bytes(content)
    if isinstance(content, str):
        return _decode_str(content, encoding)
    if hasattr(content, "read"):
        return _read_file_like(content)
    if isinstance(content, (int, float, bool)):
        raise _unsupported(content)
    try:
        return bytes(content)
    except (TypeError, ValueError) as e:
        raise _unsupported(content) from e
