"""
Decode Failures
================

Every way an ELF decode can fail is reported through one exception
hierarchy rooted at :class:`ELFDecodeError`.  Each subclass carries a
:class:`FailureKind` so callers can tell which invariant broke without
matching on message text.

Failures are deterministic: malformed input does not become valid on
retry, so nothing in the decoder retries.
"""

from __future__ import annotations

import enum
from typing import Optional


class FailureKind(str, enum.Enum):
    """Category of a decode failure."""

    MALFORMED_IDENTIFICATION = "malformed-identification"
    INCONSISTENT_HEADER = "inconsistent-header"
    TRUNCATED_INPUT = "truncated-input"
    INVALID_EXTENDED_CONVENTION = "invalid-extended-convention"
    UNRESOLVABLE_STRING = "unresolvable-string"
    BAD_ENTRY_SIZE = "bad-entry-size"
    NO_SYMBOLS = "no-symbols"
    UNSUPPORTED_COMPRESSION = "unsupported-compression"
    CORRUPT_COMPRESSED_DATA = "corrupt-compressed-data"


class ELFDecodeError(Exception):
    """Base class for every failure raised while decoding an ELF file.

    Attributes:
        kind:    The :class:`FailureKind` of the failure.
        offset:  File (or section-relative) offset the failure refers to,
                 when one is meaningful.
    """

    kind: FailureKind = FailureKind.INCONSISTENT_HEADER

    def __init__(self, message: str, *, offset: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset

    def __str__(self) -> str:
        if self.offset is None:
            return f"{self.kind.value}: {self.message}"
        return f"{self.kind.value}: {self.message} (at offset {self.offset:#x})"


class MalformedIdentificationError(ELFDecodeError):
    """Bad signature, or unsupported class, data encoding or version."""

    kind = FailureKind.MALFORMED_IDENTIFICATION


class InconsistentHeaderError(ELFDecodeError):
    """Header or table entry fields contradict each other or the format."""

    kind = FailureKind.INCONSISTENT_HEADER


class TruncatedInputError(ELFDecodeError):
    """A required read ran past the end of the source."""

    kind = FailureKind.TRUNCATED_INPUT


class InvalidExtendedConventionError(ELFDecodeError):
    """Extended section count / string index markers recovered an invalid value."""

    kind = FailureKind.INVALID_EXTENDED_CONVENTION


class UnresolvableStringError(ELFDecodeError):
    """A string table offset lies outside its table."""

    kind = FailureKind.UNRESOLVABLE_STRING


class BadEntrySizeError(ELFDecodeError):
    """A symbol table's entry size does not match the architecture record."""

    kind = FailureKind.BAD_ENTRY_SIZE


class NoSymbolsError(ELFDecodeError):
    """The requested symbol table section does not exist."""

    kind = FailureKind.NO_SYMBOLS


class UnsupportedCompressionError(ELFDecodeError):
    """A compressed section uses a compression type with no decoder."""

    kind = FailureKind.UNSUPPORTED_COMPRESSION


class CorruptCompressedDataError(ELFDecodeError):
    """A compressed section's payload failed to decompress to its declared size."""

    kind = FailureKind.CORRUPT_COMPRESSED_DATA
