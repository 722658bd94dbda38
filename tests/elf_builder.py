"""
Reference ELF encoder for the test suite.

Lays out small synthetic ELF files byte by byte, independently of the
decoder, so tests can build exactly the structure (or malformation) they
need without a toolchain.

File layout produced by :meth:`ElfImage.build`::

    [file header][program headers][section data ...][segment data ...][section headers]

Section 0 is always the null section; ``.shstrtab`` is appended last
unless disabled.  Every header field can be overridden at build time.
"""
from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass
from typing import Any, Optional

import zstandard

from elfscope.core import constants as C

_HEADER_FIELDS = (
    "type", "machine", "version", "entry", "phoff", "shoff", "flags",
    "ehsize", "phentsize", "phnum", "shentsize", "shnum", "shstrndx",
)

# (header, prog, section, chdr, sym)
_FORMATS = {
    32: ("HHIIIIIHHHHHH", "IIIIIIII", "IIIIIIIIII", "III", "IIIBBH"),
    64: ("HHIQQQIHHHHHH", "IIQQQQQQ", "IIQQQQIIQQ", "IIQQ", "IBBHQQ"),
}


@dataclass
class _Section:
    name: str
    type: int
    data: bytes = b""
    flags: int = 0
    addr: int = 0
    link: int = 0
    info: int = 0
    addralign: int = 1
    entsize: int = 0
    size: Optional[int] = None
    offset: Optional[int] = None
    name_offset: Optional[int] = None


@dataclass
class _Prog:
    type: int
    flags: int
    vaddr: int
    memsz: int
    data: bytes = b""
    align: int = 0x1000
    offset: Optional[int] = None
    filesz: Optional[int] = None


class StringTable:
    """Accumulates NUL-terminated strings; offset 0 is the empty string."""

    def __init__(self) -> None:
        self._blob = bytearray(b"\x00")
        self._offsets: dict[str, int] = {"": 0}

    def add(self, text: str) -> int:
        if text not in self._offsets:
            self._offsets[text] = len(self._blob)
            self._blob += text.encode() + b"\x00"
        return self._offsets[text]

    @property
    def data(self) -> bytes:
        return bytes(self._blob)


@dataclass
class SymbolSpec:
    name: str
    value: int = 0
    size: int = 0
    info: int = (C.STB_GLOBAL << 4) | C.STT_FUNC
    other: int = 0
    shndx: int = 1


class ElfImage:
    """Builder for a synthetic ELF file."""

    def __init__(
        self,
        bits: int = 64,
        endian: str = "<",
        *,
        type: int = C.ET_EXEC,
        machine: int = C.EM_X86_64,
        entry: int = 0x401000,
        osabi: int = C.ELFOSABI_NONE,
        abi_version: int = 0,
    ) -> None:
        self.bits = bits
        self.endian = endian
        self.type = type
        self.machine = machine
        self.entry = entry
        self.osabi = osabi
        self.abi_version = abi_version
        self.with_shstrtab = True
        self.null_section: dict[str, int] = {"type": C.SHT_NULL, "size": 0, "link": 0}
        self.sections: list[_Section] = []
        self.progs: list[_Prog] = []
        hdr, prog, sec, chdr, sym = _FORMATS[bits]
        self._hdr = struct.Struct(endian + hdr)
        self._prog = struct.Struct(endian + prog)
        self._sec = struct.Struct(endian + sec)
        self._chdr = struct.Struct(endian + chdr)
        self._sym = struct.Struct(endian + sym)

    # ------------------------------------------------------------------ #
    #  Sizes
    # ------------------------------------------------------------------ #

    @property
    def ehsize(self) -> int:
        return 16 + self._hdr.size

    @property
    def phentsize(self) -> int:
        return self._prog.size

    @property
    def shentsize(self) -> int:
        return self._sec.size

    @property
    def symsize(self) -> int:
        return self._sym.size

    @property
    def chdrsize(self) -> int:
        return self._chdr.size

    # ------------------------------------------------------------------ #
    #  Content
    # ------------------------------------------------------------------ #

    def add_section(self, name: str, type: int, data: bytes = b"", **fields: Any) -> int:
        """Append a section and return its index in the final table."""
        self.sections.append(_Section(name=name, type=type, data=data, **fields))
        return len(self.sections)

    def add_null_sections(self, count: int) -> None:
        """Append *count* unnamed SHT_NULL sections (for extended counts)."""
        self.sections.extend(_Section(name="", type=C.SHT_NULL) for _ in range(count))

    def add_prog(self, type: int, flags: int, vaddr: int, memsz: int, data: bytes = b"", **fields: Any) -> int:
        self.progs.append(_Prog(type=type, flags=flags, vaddr=vaddr, memsz=memsz, data=data, **fields))
        return len(self.progs) - 1

    def compress(self, plaintext: bytes, ctype: int = C.ELFCOMPRESS_ZLIB, addralign: int = 8) -> bytes:
        """Compression header plus payload, as stored for SHF_COMPRESSED."""
        if ctype == C.ELFCOMPRESS_ZSTD:
            payload = zstandard.ZstdCompressor().compress(plaintext)
        else:
            payload = zlib.compress(plaintext)
        return self.chdr(ctype, len(plaintext), addralign) + payload

    def chdr(self, ctype: int, size: int, addralign: int) -> bytes:
        if self.bits == 64:
            return self._chdr.pack(ctype, 0, size, addralign)
        return self._chdr.pack(ctype, size, addralign)

    def add_compressed_section(
        self,
        name: str,
        plaintext: bytes,
        ctype: int = C.ELFCOMPRESS_ZLIB,
        *,
        type: int = C.SHT_PROGBITS,
        addralign: int = 8,
        **fields: Any,
    ) -> int:
        fields["flags"] = fields.get("flags", 0) | C.SHF_COMPRESSED
        return self.add_section(name, type, self.compress(plaintext, ctype, addralign), **fields)

    def symbol(self, name_offset: int, value: int, size: int, info: int, other: int, shndx: int) -> bytes:
        if self.bits == 64:
            return self._sym.pack(name_offset, info, other, shndx, value, size)
        return self._sym.pack(name_offset, value, size, info, other, shndx)

    def add_symbol_table(
        self,
        symbols: list[SymbolSpec],
        *,
        dynamic: bool = False,
        strtab: Optional[StringTable] = None,
    ) -> tuple[int, int]:
        """Append a symbol table and its string table.

        The null symbol is written at index 0.  Returns
        ``(symtab_index, strtab_index)``.
        """
        strtab = strtab or StringTable()
        entries = [self.symbol(0, 0, 0, 0, 0, 0)]
        for sym in symbols:
            entries.append(self.symbol(
                strtab.add(sym.name), sym.value, sym.size, sym.info, sym.other, sym.shndx,
            ))
        str_index = len(self.sections) + 2
        sym_index = self.add_section(
            ".dynsym" if dynamic else ".symtab",
            C.SHT_DYNSYM if dynamic else C.SHT_SYMTAB,
            b"".join(entries),
            flags=C.SHF_ALLOC if dynamic else 0,
            link=str_index,
            info=1,
            addralign=8,
            entsize=self.symsize,
        )
        self.add_section(
            ".dynstr" if dynamic else ".strtab",
            C.SHT_STRTAB,
            strtab.data,
            flags=C.SHF_ALLOC if dynamic else 0,
        )
        return sym_index, str_index

    def add_gnu_versions(
        self,
        dynsym_index: int,
        dynstr: StringTable,
        versym: list[int],
        *,
        needs: Optional[dict[str, list[tuple[str, int]]]] = None,
        defs: Optional[list[tuple[str, int, int]]] = None,
    ) -> None:
        """Append .gnu.version (plus .gnu.version_r / .gnu.version_d).

        ``needs`` maps a library to ``(version, index)`` pairs; ``defs`` is a
        list of ``(name, index, flags)``.  String offsets are added to
        *dynstr*, which must still be the table the dynamic section links to.
        """
        dynstr_index = self.sections[dynsym_index - 1].link
        e = self.endian
        self.add_section(
            ".gnu.version", C.SHT_GNU_VERSYM,
            b"".join(struct.pack(e + "H", v) for v in versym),
            flags=C.SHF_ALLOC, link=dynsym_index, addralign=2, entsize=2,
        )
        if needs:
            out = bytearray()
            libs = list(needs.items())
            for i, (lib, versions) in enumerate(libs):
                vn_next = 0 if i == len(libs) - 1 else 16 + 16 * len(versions)
                out += struct.pack(e + "HHIII", 1, len(versions), dynstr.add(lib), 16, vn_next)
                for j, (name, index) in enumerate(versions):
                    vna_next = 0 if j == len(versions) - 1 else 16
                    out += struct.pack(e + "IHHII", 0, 0, index, dynstr.add(name), vna_next)
            self.add_section(
                ".gnu.version_r", C.SHT_GNU_VERNEED, bytes(out),
                flags=C.SHF_ALLOC, link=dynstr_index, info=len(libs), addralign=8,
            )
        if defs:
            out = bytearray()
            for i, (name, index, flags) in enumerate(defs):
                vd_next = 0 if i == len(defs) - 1 else 28
                out += struct.pack(e + "HHHHIII", 1, flags, index, 1, 0, 20, vd_next)
                out += struct.pack(e + "II", dynstr.add(name), 0)
            self.add_section(
                ".gnu.version_d", C.SHT_GNU_VERDEF, bytes(out),
                flags=C.SHF_ALLOC, link=dynstr_index, info=len(defs), addralign=8,
            )
        # Strings were appended; refresh the linked string table
        self.sections[dynstr_index - 1].data = dynstr.data

    # ------------------------------------------------------------------ #
    #  Layout
    # ------------------------------------------------------------------ #

    def build(self, **overrides: Any) -> bytes:
        """Serialise the image.

        Keyword overrides replace file header fields by name (``shnum``,
        ``shstrndx``, ``phentsize``, ...) and ``ident_version`` replaces the
        identification version byte.
        """
        sections = list(self.sections)
        names = StringTable()
        if self.with_shstrtab:
            sections.append(_Section(name=".shstrtab", type=C.SHT_STRTAB))
        name_offsets = [
            s.name_offset if s.name_offset is not None else names.add(s.name)
            for s in sections
        ]
        if self.with_shstrtab:
            sections[-1].data = names.data

        phnum = len(self.progs)
        phoff = self.ehsize if phnum else 0
        out = bytearray(self.ehsize + phnum * self.phentsize)

        placed: list[tuple[int, int]] = []
        for sec in sections:
            _align(out, 8)
            offset = sec.offset if sec.offset is not None else len(out)
            if sec.type != C.SHT_NOBITS:
                out += sec.data
            size = sec.size if sec.size is not None else len(sec.data)
            placed.append((offset, size))

        prog_offsets: list[int] = []
        for prog in self.progs:
            _align(out, 8)
            prog_offsets.append(prog.offset if prog.offset is not None else len(out))
            out += prog.data

        _align(out, 8)
        shoff = len(out)
        out += self._sec.pack(
            0, self.null_section["type"], 0, 0, 0,
            self.null_section["size"], self.null_section["link"], 0, 0, 0,
        )
        for sec, name_off, (offset, size) in zip(sections, name_offsets, placed):
            out += self._sec.pack(
                name_off, sec.type, sec.flags, sec.addr, offset, size,
                sec.link, sec.info, sec.addralign, sec.entsize,
            )

        shnum = len(sections) + 1
        header = {
            "type": self.type,
            "machine": self.machine,
            "version": C.EV_CURRENT,
            "entry": self.entry,
            "phoff": phoff,
            "shoff": shoff,
            "flags": 0,
            "ehsize": self.ehsize,
            "phentsize": self.phentsize,
            "phnum": phnum,
            "shentsize": self.shentsize,
            "shnum": shnum,
            "shstrndx": shnum - 1 if self.with_shstrtab else 0,
        }
        ident_version = overrides.pop("ident_version", C.EV_CURRENT)
        header.update(overrides)

        ident = bytes([
            0x7F, ord("E"), ord("L"), ord("F"),
            C.ELFCLASS64 if self.bits == 64 else C.ELFCLASS32,
            C.ELFDATA2LSB if self.endian == "<" else C.ELFDATA2MSB,
            ident_version,
            self.osabi,
            self.abi_version,
        ]).ljust(16, b"\x00")
        out[0:16] = ident
        self._hdr.pack_into(out, 16, *(header[f] for f in _HEADER_FIELDS))

        for i, (prog, offset) in enumerate(zip(self.progs, prog_offsets)):
            filesz = prog.filesz if prog.filesz is not None else len(prog.data)
            if self.bits == 64:
                values = (prog.type, prog.flags, offset, prog.vaddr, prog.vaddr,
                          filesz, prog.memsz, prog.align)
            else:
                values = (prog.type, offset, prog.vaddr, prog.vaddr, filesz,
                          prog.memsz, prog.flags, prog.align)
            self._prog.pack_into(out, phoff + i * self.phentsize, *values)

        return bytes(out)


def _align(buf: bytearray, alignment: int) -> None:
    pad = -len(buf) % alignment
    buf += b"\x00" * pad


# ---------------------------------------------------------------------------
# A small but complete executable
# ---------------------------------------------------------------------------

TEXT = bytes(range(0x90, 0xA0))
DATA = b"hello, elf\x00\x00\x00\x00\x00\x00"
COMMENT = b"GCC: (GNU) 13.2.0\x00"


def build_sample(bits: int = 64, endian: str = "<") -> bytes:
    """Executable with text/data/bss, a compressed note, symbols and versions.

    Section indices::

        1 .text  2 .data  3 .bss  4 .comment  5 .debug_str (zlib)
        6 .symtab  7 .strtab  8 .dynsym  9 .dynstr
        10 .gnu.version  11 .gnu.version_r  12 .shstrtab
    """
    img = ElfImage(bits, endian)
    img.add_section(".text", C.SHT_PROGBITS, TEXT,
                    flags=C.SHF_ALLOC | C.SHF_EXECINSTR, addr=0x401000, addralign=16)
    img.add_section(".data", C.SHT_PROGBITS, DATA,
                    flags=C.SHF_ALLOC | C.SHF_WRITE, addr=0x402000, addralign=8)
    img.add_section(".bss", C.SHT_NOBITS, flags=C.SHF_ALLOC | C.SHF_WRITE,
                    addr=0x402010, size=0x40, addralign=8)
    img.add_section(".comment", C.SHT_PROGBITS, COMMENT,
                    flags=C.SHF_MERGE | C.SHF_STRINGS, entsize=1)
    img.add_compressed_section(".debug_str", b"debug string\x00" * 20,
                               flags=C.SHF_MERGE | C.SHF_STRINGS, entsize=1)
    img.add_symbol_table([
        SymbolSpec("main.c", info=(C.STB_LOCAL << 4) | C.STT_FILE, shndx=C.SHN_ABS),
        SymbolSpec("_start", value=0x401000, size=16),
        SymbolSpec("message", value=0x402000, size=11,
                   info=(C.STB_GLOBAL << 4) | C.STT_OBJECT, shndx=2),
    ])
    dynstr = StringTable()
    dynsym, _ = img.add_symbol_table([
        SymbolSpec("puts", shndx=C.SHN_UNDEF),
        SymbolSpec("__cxa_finalize", info=(C.STB_WEAK << 4) | C.STT_FUNC, shndx=C.SHN_UNDEF),
    ], dynamic=True, strtab=dynstr)
    img.add_gnu_versions(dynsym, dynstr, [0, 2, 3], needs={
        "libc.so.6": [("GLIBC_2.2.5", 2), ("GLIBC_2.34", 3)],
    })
    img.add_prog(C.PT_LOAD, C.PF_R | C.PF_X, 0x401000, 0x1000, TEXT)
    img.add_prog(C.PT_LOAD, C.PF_R | C.PF_W, 0x402000, 0x1000, DATA)
    img.add_prog(C.PT_GNU_STACK, C.PF_R | C.PF_W, 0, 0, align=16)
    return img.build()
