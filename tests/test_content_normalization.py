"""
Unit tests for upload content normalization.

Content may arrive as bytes, buffer-like objects, base64 text, other
binary strings or file-like objects.
"""

import base64
import io

import pytest

from packages.file_storage.content import normalize_content
from packages.file_storage.exceptions import InvalidInputError

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


class TestBytesLike:
    def test_bytes_unchanged(self):
        assert normalize_content(PNG_HEADER) is PNG_HEADER

    def test_bytearray_and_memoryview(self):
        assert normalize_content(bytearray(PNG_HEADER)) == PNG_HEADER
        assert normalize_content(memoryview(PNG_HEADER)) == PNG_HEADER

    def test_list_of_ints(self):
        assert normalize_content([72, 105]) == b"Hi"

    def test_file_like(self):
        assert normalize_content(io.BytesIO(PNG_HEADER)) == PNG_HEADER

    def test_none_is_empty(self):
        assert normalize_content(None) == b""


class TestStrings:
    def test_base64_detected(self):
        encoded = base64.b64encode(PNG_HEADER).decode()
        assert normalize_content(encoded) == PNG_HEADER

    def test_non_base64_text_encoded_as_binary(self):
        assert normalize_content("hello world!") == b"hello world!"

    def test_binary_string_keeps_low_byte(self):
        assert normalize_content("\x89P\xff ") == b"\x89P\xff "

    def test_ambiguous_text_treated_as_base64(self):
        # Known limitation: plain words made of base64 characters are decoded
        assert normalize_content("abcd") == base64.b64decode("abcd")

    def test_explicit_encoding_skips_detection(self):
        assert normalize_content("abcd", encoding="utf-8") == b"abcd"
        assert normalize_content("abcd", encoding="binary") == b"abcd"

    def test_explicit_base64_invalid_raises(self):
        with pytest.raises(InvalidInputError):
            normalize_content("a", encoding="base64")

    def test_detected_base64_that_fails_to_decode_falls_back(self):
        assert normalize_content("abcde") == b"abcde"

    def test_trailing_newline_is_not_base64(self):
        assert normalize_content("abcd\n") == b"abcd\n"
        assert normalize_content("aGk=\n") == b"aGk=\n"


class TestUnsupported:
    @pytest.mark.parametrize("content", [42, 1.5, object()])
    def test_raises_invalid_input(self, content):
        with pytest.raises(InvalidInputError):
            normalize_content(content)

    def test_async_reader_rejected(self):
        class AsyncReader:
            async def read(self):
                return b"data"

        with pytest.raises(InvalidInputError) as exc_info:
            normalize_content(AsyncReader())

        assert exc_info.value.detail == {"field": "content"}

    def test_reader_returning_non_bytes_rejected(self):
        class NumberReader:
            def read(self):
                return 3.5

        with pytest.raises(InvalidInputError):
            normalize_content(NumberReader())
