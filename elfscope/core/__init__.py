"""
ElfScope Core Module
=====================

Decoded data models, the failure hierarchy and random-access sources.
"""

from elfscope.core.errors import (
    BadEntrySizeError,
    CorruptCompressedDataError,
    ELFDecodeError,
    FailureKind,
    InconsistentHeaderError,
    InvalidExtendedConventionError,
    MalformedIdentificationError,
    NoSymbolsError,
    TruncatedInputError,
    UnresolvableStringError,
    UnsupportedCompressionError,
)
from elfscope.core.models import (
    FileHeader,
    Identification,
    ProgHeader,
    SectionHeader,
    Symbol,
)

__all__ = [
    "BadEntrySizeError",
    "CorruptCompressedDataError",
    "ELFDecodeError",
    "FailureKind",
    "FileHeader",
    "Identification",
    "InconsistentHeaderError",
    "InvalidExtendedConventionError",
    "MalformedIdentificationError",
    "NoSymbolsError",
    "ProgHeader",
    "SectionHeader",
    "Symbol",
    "TruncatedInputError",
    "UnresolvableStringError",
    "UnsupportedCompressionError",
]
