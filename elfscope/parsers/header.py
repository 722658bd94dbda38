"""
Identification Reader and File Header Decoder
===============================================

Reads the 16-byte ``e_ident`` block, picks the 32/64-bit layout and
decodes the file header.  The retained part becomes a
:class:`FileHeader`; the table descriptors (offsets, entry sizes, counts
and the section-name string table index) go into a :class:`TableLayout`
that lives only for the duration of the decode.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from elfscope.core import constants as C
from elfscope.core.errors import (
    InconsistentHeaderError,
    MalformedIdentificationError,
    TruncatedInputError,
)
from elfscope.core.models import FileHeader, Identification
from elfscope.core.source import SectionReader
from elfscope.parsers.layouts import ElfLayout, as_signed64

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableLayout:
    """Where the program and section header tables live."""

    phoff: int
    phentsize: int
    phnum: int
    shoff: int
    shentsize: int
    shnum: int
    shstrndx: int


def read_identification(reader: SectionReader) -> Identification:
    """Read and validate ``e_ident``.

    Raises:
        TruncatedInputError: If fewer than 16 bytes are available.
        MalformedIdentificationError: On a bad signature or an unsupported
            class, data encoding or version.
    """
    ident = reader.read_at(0, C.EI_NIDENT)
    if not C.ELF_MAGIC.startswith(ident[:4]):
        raise MalformedIdentificationError(f"bad ELF signature {ident[:4]!r}")
    if len(ident) < C.EI_NIDENT:
        raise TruncatedInputError(
            f"identification needs {C.EI_NIDENT} bytes, got {len(ident)}", offset=0
        )

    elf_class = ident[C.EI_CLASS]
    if elf_class not in (C.ELFCLASS32, C.ELFCLASS64):
        raise MalformedIdentificationError(
            f"unsupported ELF class {elf_class}", offset=C.EI_CLASS
        )

    data = ident[C.EI_DATA]
    if data not in (C.ELFDATA2LSB, C.ELFDATA2MSB):
        raise MalformedIdentificationError(
            f"unsupported data encoding {data}", offset=C.EI_DATA
        )

    version = ident[C.EI_VERSION]
    if version != C.EV_CURRENT:
        raise MalformedIdentificationError(
            f"unsupported ELF version {version}", offset=C.EI_VERSION
        )

    return Identification(
        elf_class=elf_class,
        data=data,
        version=version,
        osabi=ident[C.EI_OSABI],
        abi_version=ident[C.EI_ABIVERSION],
        raw=bytes(ident),
    )


def read_file_header(
    reader: SectionReader,
    ident: Identification,
) -> tuple[FileHeader, TableLayout, ElfLayout]:
    """Decode the file header that follows *ident*.

    Raises:
        TruncatedInputError: If the header is cut short.
        InconsistentHeaderError: If header fields contradict each other.
    """
    layout = ElfLayout.select(ident.elf_class, ident.data)
    raw = reader.read_exact(C.EI_NIDENT, layout.header.size)
    hdr = layout.unpack_header(raw)

    if hdr["version"] != ident.version:
        raise InconsistentHeaderError(
            f"header version {hdr['version']} does not match "
            f"identification version {ident.version}"
        )

    phoff = as_signed64(hdr["phoff"])
    shoff = as_signed64(hdr["shoff"])
    if phoff < 0:
        raise InconsistentHeaderError(f"negative program header offset {phoff}")
    if shoff < 0:
        raise InconsistentHeaderError(f"negative section header offset {shoff}")

    shnum = hdr["shnum"]
    shstrndx = hdr["shstrndx"]
    if shoff == 0 and shnum != 0:
        raise InconsistentHeaderError(
            f"{shnum} sections declared but no section header table"
        )
    if shnum > 0 and shstrndx >= shnum and shstrndx != C.SHN_XINDEX:
        raise InconsistentHeaderError(
            f"section name table index {shstrndx} out of range for {shnum} sections"
        )

    phnum = hdr["phnum"]
    phentsize = hdr["phentsize"]
    if phnum > 0 and phentsize < layout.prog.size:
        raise InconsistentHeaderError(
            f"program header entry size {phentsize} is below {layout.prog.size}"
        )

    header = FileHeader(
        ident=ident,
        type=hdr["type"],
        machine=hdr["machine"],
        entry=hdr["entry"],
        flags=hdr["flags"],
    )
    tables = TableLayout(
        phoff=phoff,
        phentsize=phentsize,
        phnum=phnum,
        shoff=shoff,
        shentsize=hdr["shentsize"],
        shnum=shnum,
        shstrndx=shstrndx,
    )
    logger.debug(
        "ELF%d %s header: phoff=%#x phnum=%d shoff=%#x shnum=%d shstrndx=%d",
        ident.bits, ident.byte_order, phoff, phnum, shoff, shnum, shstrndx,
    )
    return header, tables, layout
