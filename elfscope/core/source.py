"""
Random-Access Byte Sources
===========================

The decoder never holds a cursor into its input: every read is a
positioned read of ``size`` bytes at ``offset``.  Anything that offers
``read_at(offset, size) -> bytes`` can be decoded; this module ships
adapters for in-memory buffers, files on disk and seekable binary file
objects, plus :class:`SectionReader`, a bounded window onto a source.

Concurrency:
    :class:`BytesSource` and :class:`FileSource` keep no shared cursor and
    may be read from several threads.  :class:`StreamSource` serialises its
    seek-then-read pairs with a lock.  Streams handed out by
    :meth:`SectionReader.open` carry their own position and must not be
    shared between threads.
"""

from __future__ import annotations

import io
import os
import threading
from pathlib import Path
from typing import Any, BinaryIO, Optional, Protocol, runtime_checkable

from elfscope.core.errors import TruncatedInputError

# Largest offset a signed 64-bit file position can address
MAX_OFFSET: int = (1 << 63) - 1

# Upper bound on a single stream read; header sizes are untrusted.
READ_CHUNK: int = 1 << 20


@runtime_checkable
class RandomAccessSource(Protocol):
    """Anything supporting positioned reads.

    ``read_at`` returns at most *size* bytes; fewer only when the data
    ends before ``offset + size``.
    """

    def read_at(self, offset: int, size: int) -> bytes:
        ...


class BytesSource:
    """Positioned reads over an in-memory buffer."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = memoryview(data).cast("B") if not isinstance(data, bytes) else data

    def __len__(self) -> int:
        return len(self._data)

    def read_at(self, offset: int, size: int) -> bytes:
        if offset < 0 or size <= 0 or offset >= len(self._data):
            return b""
        return bytes(self._data[offset:offset + size])


class FileSource:
    """Positioned reads from a file on disk.

    Uses :func:`os.pread` where the platform provides it, so concurrent
    readers never fight over a file position.  Elsewhere the seek/read
    pair is serialised by a lock.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._fh: Optional[BinaryIO] = open(self._path, "rb")
        self._lock = threading.Lock()
        self._use_pread = hasattr(os, "pread")

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._fh is None

    def size(self) -> int:
        return self._path.stat().st_size

    def read_at(self, offset: int, size: int) -> bytes:
        if self._fh is None:
            raise ValueError(f"read from closed source: {self._path}")
        if offset < 0 or size <= 0:
            return b""
        fd = self._fh.fileno()
        # Never allocate past end of file for a bogus header size.
        size = min(size, os.fstat(fd).st_size - offset)
        if size <= 0:
            return b""
        if self._use_pread:
            return _pread_full(fd, offset, size)
        with self._lock:
            self._fh.seek(offset)
            return self._fh.read(size)

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> FileSource:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


def _pread_full(fd: int, offset: int, size: int) -> bytes:
    """Loop over :func:`os.pread` until *size* bytes or end of file."""
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = os.pread(fd, remaining, offset)
        if not chunk:
            break
        chunks.append(chunk)
        offset += len(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


class StreamSource:
    """Positioned reads from a seekable binary file object.

    The wrapped object's position is shared state, so every read holds a
    lock for its seek/read pair.  The stream is not closed by this class.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def read_at(self, offset: int, size: int) -> bytes:
        if offset < 0 or size <= 0:
            return b""
        with self._lock:
            self._stream.seek(offset)
            chunks: list[bytes] = []
            remaining = size
            while remaining > 0:
                chunk = self._stream.read(min(remaining, READ_CHUNK))
                if not chunk:
                    break
                chunks.append(chunk)
                remaining -= len(chunk)
            return b"".join(chunks)


def as_source(obj: Any) -> RandomAccessSource:
    """Coerce *obj* into a :class:`RandomAccessSource`.

    Accepts objects that already implement ``read_at``, bytes-like
    buffers, and seekable binary file objects.

    Raises:
        TypeError: If *obj* cannot serve positioned reads.
    """
    if isinstance(obj, RandomAccessSource):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BytesSource(obj)
    if hasattr(obj, "read") and hasattr(obj, "seek"):
        return StreamSource(obj)
    raise TypeError(
        f"expected bytes, a file object or a read_at() source, got {type(obj).__name__}"
    )


# ---------------------------------------------------------------------------
# Range views
# ---------------------------------------------------------------------------

class SectionReader:
    """A bounded, read-only window ``[base, base + length)`` onto a source.

    Views are cheap and independent: several may cover the same bytes of
    one source.  A view never reads outside its window, and positions
    passed to it are relative to ``base``.
    """

    def __init__(
        self,
        source: RandomAccessSource,
        base: int = 0,
        length: int = MAX_OFFSET,
    ) -> None:
        self._source = source
        self._base = base
        # Clamp so base + length stays addressable
        self._length = min(length, MAX_OFFSET - base) if base <= MAX_OFFSET else 0

    @property
    def base(self) -> int:
        return self._base

    def __len__(self) -> int:
        return self._length

    def read_at(self, offset: int, size: int) -> bytes:
        """Read up to *size* bytes at view-relative *offset*.

        Returns fewer bytes at the end of the window or of the source.
        """
        if offset < 0 or offset >= self._length or size <= 0:
            return b""
        size = min(size, self._length - offset)
        return self._source.read_at(self._base + offset, size)

    def read_exact(self, offset: int, size: int) -> bytes:
        """Read exactly *size* bytes or raise :class:`TruncatedInputError`."""
        data = self.read_at(offset, size)
        if len(data) != size:
            raise TruncatedInputError(
                f"wanted {size} bytes, got {len(data)}",
                offset=self._base + offset,
            )
        return data

    def open(self) -> RangeStream:
        """Return a fresh sequential stream over the whole window."""
        return RangeStream(self)


class RangeStream(io.RawIOBase):
    """Sequential ``read``/``seek`` façade over a :class:`SectionReader`.

    Each stream owns its position, so several streams may walk the same
    view without interfering.
    """

    def __init__(self, reader: SectionReader) -> None:
        super().__init__()
        self._reader = reader
        self._pos = 0

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._pos

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self._pos + offset
        elif whence == io.SEEK_END:
            target = len(self._reader) + offset
        else:
            raise ValueError(f"invalid whence: {whence}")
        if target < 0:
            raise ValueError(f"negative seek position {target}")
        self._pos = target
        return self._pos

    def readinto(self, buffer: Any) -> int:
        view = memoryview(buffer).cast("B")
        data = self._reader.read_at(self._pos, len(view))
        n = len(data)
        view[:n] = data
        self._pos += n
        return n
