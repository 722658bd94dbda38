"""
ELF32 / ELF64 Record Layouts
=============================

The 32-bit and 64-bit ELF variants share semantics but differ in field
widths and, for program headers and symbols, in field order.  An
:class:`ElfLayout` is selected once from the identification block and
every decode step asks it to unpack a record; each ``unpack_*`` method
returns the fields under their 64-bit names so downstream code never
branches on width again.

Record sizes (bytes):

    ==============  =====  =====
    Record          ELF32  ELF64
    ==============  =====  =====
    File header       52     64
    Program header    32     56
    Section header    40     64
    Compression hdr   12     24
    Symbol            16     24
    ==============  =====  =====
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any

from elfscope.core import constants as C
from elfscope.core.errors import TruncatedInputError

_HEADER_FIELDS = (
    "type", "machine", "version", "entry", "phoff", "shoff", "flags",
    "ehsize", "phentsize", "phnum", "shentsize", "shnum", "shstrndx",
)
_SECTION_FIELDS = (
    "name", "type", "flags", "addr", "offset", "size", "link", "info",
    "addralign", "entsize",
)
_PROG32_FIELDS = (
    "type", "offset", "vaddr", "paddr", "filesz", "memsz", "flags", "align",
)
_PROG64_FIELDS = (
    "type", "flags", "offset", "vaddr", "paddr", "filesz", "memsz", "align",
)
_CHDR32_FIELDS = ("type", "size", "addralign")
_CHDR64_FIELDS = ("type", "reserved", "size", "addralign")
_SYM32_FIELDS = ("name", "value", "size", "info", "other", "shndx")
_SYM64_FIELDS = ("name", "info", "other", "shndx", "value", "size")

# (header, prog, section, chdr, sym) struct formats, without byte order
_FORMATS: dict[int, tuple[str, str, str, str, str]] = {
    C.ELFCLASS32: ("HHIIIIIHHHHHH", "IIIIIIII", "IIIIIIIIII", "III", "IIIBBH"),
    C.ELFCLASS64: ("HHIQQQIHHHHHH", "IIQQQQQQ", "IIQQQQIIQQ", "IIQQ", "IBBHQQ"),
}


@dataclass(frozen=True)
class ElfLayout:
    """Fixed record layouts for one (class, byte order) combination."""

    elf_class: int
    endian: str
    header: struct.Struct
    prog: struct.Struct
    section: struct.Struct
    chdr: struct.Struct
    sym: struct.Struct

    @classmethod
    def select(cls, elf_class: int, data: int) -> ElfLayout:
        """Build the layout for an identification's class and data bytes."""
        endian = "<" if data == C.ELFDATA2LSB else ">"
        hdr, prog, sec, chdr, sym = _FORMATS[elf_class]
        return cls(
            elf_class=elf_class,
            endian=endian,
            header=struct.Struct(endian + hdr),
            prog=struct.Struct(endian + prog),
            section=struct.Struct(endian + sec),
            chdr=struct.Struct(endian + chdr),
            sym=struct.Struct(endian + sym),
        )

    @property
    def is_64bit(self) -> bool:
        return self.elf_class == C.ELFCLASS64

    # ------------------------------------------------------------------ #
    #  Record decoding
    # ------------------------------------------------------------------ #

    def unpack_header(self, raw: bytes) -> dict[str, int]:
        """Decode a file header from the bytes following ``e_ident``."""
        return _unpack(self.header, _HEADER_FIELDS, raw)

    def unpack_prog(self, raw: bytes) -> dict[str, int]:
        fields = _PROG64_FIELDS if self.is_64bit else _PROG32_FIELDS
        return _unpack(self.prog, fields, raw)

    def unpack_section(self, raw: bytes) -> dict[str, int]:
        return _unpack(self.section, _SECTION_FIELDS, raw)

    def unpack_chdr(self, raw: bytes) -> dict[str, int]:
        fields = _CHDR64_FIELDS if self.is_64bit else _CHDR32_FIELDS
        return _unpack(self.chdr, fields, raw)

    def unpack_sym(self, raw: bytes, offset: int = 0) -> dict[str, int]:
        fields = _SYM64_FIELDS if self.is_64bit else _SYM32_FIELDS
        return _unpack(self.sym, fields, raw, offset)

    def u16(self, raw: bytes, offset: int) -> int:
        return struct.unpack_from(self.endian + "H", raw, offset)[0]

    def u32(self, raw: bytes, offset: int) -> int:
        return struct.unpack_from(self.endian + "I", raw, offset)[0]


def _unpack(
    st: struct.Struct,
    names: tuple[str, ...],
    raw: bytes,
    offset: int = 0,
) -> dict[str, Any]:
    try:
        values = st.unpack_from(raw, offset)
    except struct.error as exc:
        raise TruncatedInputError(
            f"record needs {st.size} bytes: {exc}", offset=offset
        ) from exc
    return dict(zip(names, values))


def as_signed64(value: int) -> int:
    """Reinterpret an unsigned 64-bit value as two's-complement signed."""
    return value - (1 << 64) if value & (1 << 63) else value
