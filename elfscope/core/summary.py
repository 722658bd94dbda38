"""
ElfScope Report Models
=======================

Flattened, display-ready view of a decoded :class:`ElfFile`.  Numeric
codes are rendered to their symbolic names here so that the console and
JSON outputs only iterate rows; neither re-reads the binary.

The section-to-segment mapping follows the usual loader rule: an
allocated section lies in a segment when its address range is contained
in the segment's memory image::

    seg.vaddr <= sec.addr  and  sec.addr + sec.size <= seg.vaddr + seg.memsz
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from elfscope.core import constants as C
from elfscope.core.elffile import ElfFile
from elfscope.core.errors import NoSymbolsError
from elfscope.core.models import Symbol

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Row models
# ---------------------------------------------------------------------------

class HeaderSummary(BaseModel):
    """File identification and header fields.

    Attributes:
        path: Path the file was read from.
        magic: The 16 identification bytes as hex.
        elf_class: ``ELF32`` or ``ELF64``.
        data: Data encoding name.
        version: Format version name.
        osabi: OS/ABI name.
        abi_version: ABI version number.
        byte_order: ``"little"`` or ``"big"``.
        type: Object file type name.
        machine: Target machine name.
        entry: Entry point virtual address.
        flags: Processor-specific flags.
    """
    path: str = ""
    magic: str = ""
    elf_class: str = ""
    data: str = ""
    version: str = ""
    osabi: str = ""
    abi_version: int = 0
    byte_order: str = "little"
    type: str = ""
    machine: str = ""
    entry: int = 0
    flags: int = 0


class SegmentRow(BaseModel):
    """One program header."""
    index: int
    type: str
    flags: str
    offset: int
    vaddr: int
    paddr: int
    filesz: int
    memsz: int
    align: int


class SectionRow(BaseModel):
    """One section header.  ``compression`` is empty for plain sections."""
    index: int
    name: str
    type: str
    flags: str
    addr: int
    offset: int
    size: int
    file_size: int
    link: int
    info: int
    addralign: int
    entsize: int
    compression: str = ""


class MappingEntry(BaseModel):
    """An allocated section contained in a segment."""
    section: str
    segment_index: int
    segment_type: str


class SymbolRow(BaseModel):
    """A named symbol, ready for listing."""
    index: int
    name: str
    value: int
    size: int
    type: str
    bind: str
    visibility: str
    section: str
    version: str = ""
    library: str = ""


class ElfSummary(BaseModel):
    """Everything the outputs render for one file."""
    header: HeaderSummary = Field(default_factory=HeaderSummary)
    segments: list[SegmentRow] = Field(default_factory=list)
    sections: list[SectionRow] = Field(default_factory=list)
    mapping: list[MappingEntry] = Field(default_factory=list)
    symbols: list[SymbolRow] = Field(default_factory=list)
    dynamic_symbols: list[SymbolRow] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def section_segment_mapping(elf: ElfFile) -> list[MappingEntry]:
    """Pair every allocated section with each segment that contains it."""
    mapping: list[MappingEntry] = []
    for section in elf.sections:
        hdr = section.header
        if not hdr.flags & C.SHF_ALLOC:
            continue
        for index, prog in enumerate(elf.progs):
            seg = prog.header
            if seg.vaddr <= hdr.addr and hdr.addr + hdr.size <= seg.vaddr + seg.memsz:
                mapping.append(MappingEntry(
                    section=hdr.name,
                    segment_index=index,
                    segment_type=C.segment_type_name(seg.type),
                ))
    return mapping


def _symbol_rows(symbols: list[Symbol], include_unnamed: bool) -> list[SymbolRow]:
    rows = []
    for index, sym in enumerate(symbols):
        if not include_unnamed and not sym.name:
            continue
        rows.append(SymbolRow(
            index=index,
            name=sym.name,
            value=sym.value,
            size=sym.size,
            type=C.symbol_type_name(sym.type),
            bind=C.bind_name(sym.bind),
            visibility=C.visibility_name(sym.visibility),
            section=C.section_index_name(sym.section),
            version=sym.version,
            library=sym.library,
        ))
    return rows


def _load_symbols(elf: ElfFile, dynamic: bool) -> list[Symbol]:
    try:
        return elf.dynamic_symbols() if dynamic else elf.symbols()
    except NoSymbolsError as exc:
        logger.debug("%s", exc)
        return []


def summarize(
    elf: ElfFile,
    path: str = "<memory>",
    *,
    include_unnamed: bool = False,
    include_dynamic: bool = True,
) -> ElfSummary:
    """Build an :class:`ElfSummary` for *elf*.

    A missing symbol table yields an empty list; every other decode
    failure propagates.
    """
    hdr = elf.header
    ident = hdr.ident
    header = HeaderSummary(
        path=path,
        magic=ident.raw.hex(),
        elf_class=C.class_name(ident.elf_class),
        data=C.data_name(ident.data),
        version=C.version_name(ident.version),
        osabi=C.osabi_name(ident.osabi),
        abi_version=ident.abi_version,
        byte_order=ident.byte_order,
        type=C.type_name(hdr.type),
        machine=C.machine_name(hdr.machine),
        entry=hdr.entry,
        flags=hdr.flags,
    )

    segments = [
        SegmentRow(
            index=i,
            type=C.segment_type_name(p.header.type),
            flags=C.segment_flags_str(p.header.flags),
            offset=p.header.offset,
            vaddr=p.header.vaddr,
            paddr=p.header.paddr,
            filesz=p.header.filesz,
            memsz=p.header.memsz,
            align=p.header.align,
        )
        for i, p in enumerate(elf.progs)
    ]

    sections = [
        SectionRow(
            index=i,
            name=s.name,
            type=C.section_type_name(s.type),
            flags=C.section_flags_str(s.header.flags),
            addr=s.header.addr,
            offset=s.header.offset,
            size=s.header.size,
            file_size=s.header.file_size,
            link=s.header.link,
            info=s.header.info,
            addralign=s.header.addralign,
            entsize=s.header.entsize,
            compression=(
                C.compression_name(s.compression_type) if s.header.is_compressed else ""
            ),
        )
        for i, s in enumerate(elf.sections)
    ]

    summary = ElfSummary(
        header=header,
        segments=segments,
        sections=sections,
        mapping=section_segment_mapping(elf),
        symbols=_symbol_rows(_load_symbols(elf, dynamic=False), include_unnamed),
    )
    if include_dynamic:
        summary.dynamic_symbols = _symbol_rows(
            _load_symbols(elf, dynamic=True), include_unnamed
        )
    return summary
