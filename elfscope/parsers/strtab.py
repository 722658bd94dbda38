"""
String table lookups.

A string table is a blob of NUL-terminated strings addressed by byte
offset.  Offset 0 conventionally holds an empty string.
"""

from __future__ import annotations

from elfscope.core.errors import UnresolvableStringError


def get_string(blob: bytes, start: int) -> str:
    """Return the string at *start* in *blob*.

    The string runs up to (not including) the first NUL byte, or to the
    end of the blob when no NUL follows.

    Raises:
        UnresolvableStringError: If *start* is negative or not inside *blob*.
    """
    if start < 0 or start >= len(blob):
        raise UnresolvableStringError(
            f"string offset {start} outside table of {len(blob)} bytes",
            offset=start,
        )
    end = blob.find(b"\x00", start)
    if end == -1:
        end = len(blob)
    return blob[start:end].decode("utf-8", errors="replace")
