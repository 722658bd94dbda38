"""
Section Content Streams
========================

Stream types behind :meth:`Section.open`:

    - :class:`ZeroStream` -- ``SHT_NOBITS`` sections occupy no file space;
      their content is ``size`` zero bytes.
    - :class:`DecompressingStream` -- ``SHF_COMPRESSED`` sections are
      inflated lazily as they are read.

Decompressors cannot seek.  A :class:`DecompressingStream` therefore
creates its decompressor on first read, serves bytes strictly in order,
skips forward by discarding output, and rebuilds the decompressor from
the start of the payload when asked to move backwards.  Every call to
``Section.open`` returns a new stream, so callers never share one.

Supported compression types:
    - ``ELFCOMPRESS_ZLIB`` via :mod:`zlib`
    - ``ELFCOMPRESS_ZSTD`` via the ``zstandard`` package
"""

from __future__ import annotations

import io
import logging
import zlib
from typing import Any, Optional

import zstandard

from elfscope.core import constants as C
from elfscope.core.errors import (
    CorruptCompressedDataError,
    UnsupportedCompressionError,
)
from elfscope.core.source import RangeStream, SectionReader

logger = logging.getLogger(__name__)

_CHUNK_SIZE: int = 64 * 1024

_DECOMPRESS_ERRORS: tuple[type[Exception], ...] = (zlib.error, zstandard.ZstdError)


def _new_decompressor(compression_type: int) -> Any:
    if compression_type == C.ELFCOMPRESS_ZLIB:
        return zlib.decompressobj()
    if compression_type == C.ELFCOMPRESS_ZSTD:
        return zstandard.ZstdDecompressor().decompressobj()
    raise UnsupportedCompressionError(
        f"unsupported section compression type {compression_type:#x}"
    )


def is_supported_compression(compression_type: int) -> bool:
    return compression_type in (C.ELFCOMPRESS_ZLIB, C.ELFCOMPRESS_ZSTD)


class ZeroStream(io.RawIOBase):
    """A seekable stream of *size* zero bytes."""

    def __init__(self, size: int) -> None:
        super().__init__()
        self._size = size
        self._pos = 0

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._pos

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._pos = _resolve_seek(self._pos, self._size, offset, whence)
        return self._pos

    def readinto(self, buffer: Any) -> int:
        view = memoryview(buffer).cast("B")
        n = max(0, min(len(view), self._size - self._pos))
        view[:n] = bytes(n)
        self._pos += n
        return n


class DecompressingStream(io.RawIOBase):
    """Lazily inflated view of a compressed section payload.

    Args:
        payload:           View over the compressed bytes (the section's
                           on-disk range past its compression header).
        compression_type:  ``ch_type`` from the compression header.
        size:              Uncompressed size declared by the header.

    Raises:
        UnsupportedCompressionError: Immediately, for unknown compression types.
        CorruptCompressedDataError:  On read, if the payload is invalid or
                                     inflates to fewer than *size* bytes.
    """

    def __init__(self, payload: SectionReader, compression_type: int, size: int) -> None:
        if not is_supported_compression(compression_type):
            raise UnsupportedCompressionError(
                f"unsupported section compression type {compression_type:#x}"
            )
        super().__init__()
        self._payload = payload
        self._compression_type = compression_type
        self._size = size
        self._pos = 0
        self._raw: Optional[RangeStream] = None
        self._inflater: Any = None
        self._pending = bytearray()
        self._exhausted = False

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._pos

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        target = _resolve_seek(self._pos, self._size, offset, whence)
        if self._raw is None or target < self._pos:
            self._restart()
        self._discard(min(target, self._size) - self._pos)
        self._pos = target
        return self._pos

    def readinto(self, buffer: Any) -> int:
        view = memoryview(buffer).cast("B")
        want = min(len(view), self._size - self._pos)
        if want <= 0:
            return 0
        self._fill(want)
        n = min(want, len(self._pending))
        if n == 0:
            raise CorruptCompressedDataError(
                f"compressed payload ends after {self._pos} of {self._size} bytes",
                offset=self._payload.base,
            )
        view[:n] = self._pending[:n]
        del self._pending[:n]
        self._pos += n
        return n

    # ------------------------------------------------------------------ #
    #  Internals
    # ------------------------------------------------------------------ #

    def _restart(self) -> None:
        logger.debug(
            "Starting %s decompression at file offset %#x",
            C.compression_name(self._compression_type),
            self._payload.base,
        )
        self._raw = self._payload.open()
        self._inflater = _new_decompressor(self._compression_type)
        self._pending = bytearray()
        self._exhausted = False
        self._pos = 0

    def _fill(self, want: int) -> None:
        """Inflate until *want* bytes are pending or the payload runs out."""
        if self._raw is None:
            self._restart()
        while len(self._pending) < want and not self._exhausted:
            if getattr(self._inflater, "eof", False):
                self._exhausted = True
                break
            chunk = self._raw.read(_CHUNK_SIZE)
            try:
                if not chunk:
                    self._exhausted = True
                    self._pending += self._inflater.flush()
                    break
                self._pending += self._inflater.decompress(chunk)
            except _DECOMPRESS_ERRORS as exc:
                raise CorruptCompressedDataError(
                    f"cannot decompress section payload: {exc}",
                    offset=self._payload.base,
                ) from exc

    def _discard(self, count: int) -> None:
        while count > 0:
            self._fill(min(count, _CHUNK_SIZE))
            n = min(count, len(self._pending))
            if n == 0:
                return
            del self._pending[:n]
            self._pos += n
            count -= n


def _resolve_seek(pos: int, size: int, offset: int, whence: int) -> int:
    if whence == io.SEEK_SET:
        target = offset
    elif whence == io.SEEK_CUR:
        target = pos + offset
    elif whence == io.SEEK_END:
        target = size + offset
    else:
        raise ValueError(f"invalid whence: {whence}")
    if target < 0:
        raise ValueError(f"negative seek position {target}")
    return target
