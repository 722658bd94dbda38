"""
Section Header Table Reader
============================

Decodes the section header table in two phases:

    1. Every slot at ``shoff + i * shentsize`` becomes a :class:`Section`
       with an empty name, a view over its on-disk bytes and, when
       ``SHF_COMPRESSED`` is set, the compression header already decoded.
    2. The section-name string table is read (through the normal content
       path, so a compressed ``.shstrtab`` works) and every section gets
       its name.  Any name that cannot be resolved fails the whole decode.

Two gABI escape hatches are honoured before phase 1, both stored in the
otherwise unused section header at index 0:

    - ``e_shnum == 0`` with a non-zero ``e_shoff``: the real section count
      is section 0's ``sh_size``.
    - ``e_shstrndx == SHN_XINDEX``: the real string table index is
      section 0's ``sh_link``.
"""

from __future__ import annotations

import logging

from elfscope.core import constants as C
from elfscope.core.elffile import Section
from elfscope.core.errors import (
    InconsistentHeaderError,
    InvalidExtendedConventionError,
)
from elfscope.core.models import SectionHeader
from elfscope.core.source import RandomAccessSource, SectionReader
from elfscope.parsers.header import TableLayout
from elfscope.parsers.layouts import ElfLayout, as_signed64
from elfscope.parsers.strtab import get_string

logger = logging.getLogger(__name__)


def resolve_extended_counts(
    reader: SectionReader,
    layout: ElfLayout,
    tables: TableLayout,
) -> tuple[int, int]:
    """Return the real ``(shnum, shstrndx)`` after applying the extended conventions.

    Raises:
        InvalidExtendedConventionError: If section 0 is not ``SHT_NULL`` when
            it carries the count, or a recovered value is below
            ``SHN_LORESERVE`` or out of range.
    """
    shnum = tables.shnum
    shstrndx = tables.shstrndx
    extended_count = tables.shoff > 0 and shnum == 0
    extended_index = tables.shoff > 0 and shstrndx == C.SHN_XINDEX
    if not (extended_count or extended_index):
        return shnum, shstrndx

    sh0 = layout.unpack_section(reader.read_exact(tables.shoff, layout.section.size))

    if extended_count:
        if sh0["type"] != C.SHT_NULL:
            raise InvalidExtendedConventionError(
                f"section 0 holds the section count but has type "
                f"{C.section_type_name(sh0['type'])}",
                offset=tables.shoff,
            )
        shnum = sh0["size"]
        if shnum < C.SHN_LORESERVE:
            raise InvalidExtendedConventionError(
                f"extended section count {shnum} is below {C.SHN_LORESERVE:#x}",
                offset=tables.shoff,
            )
        logger.debug("Extended section count: %d", shnum)

    if extended_index:
        shstrndx = sh0["link"]
        if shstrndx < C.SHN_LORESERVE:
            raise InvalidExtendedConventionError(
                f"extended string table index {shstrndx} is below {C.SHN_LORESERVE:#x}",
                offset=tables.shoff,
            )
        if shstrndx >= shnum:
            raise InvalidExtendedConventionError(
                f"extended string table index {shstrndx} out of range for "
                f"{shnum} sections",
                offset=tables.shoff,
            )
        logger.debug("Extended string table index: %d", shstrndx)

    return shnum, shstrndx


def _decode_section(
    index: int,
    off: int,
    source: RandomAccessSource,
    reader: SectionReader,
    layout: ElfLayout,
) -> Section:
    sh = layout.unpack_section(reader.read_exact(off, layout.section.size))

    if as_signed64(sh["offset"]) < 0:
        raise InconsistentHeaderError(f"section {index} has negative offset", offset=off)
    if as_signed64(sh["size"]) < 0:
        raise InconsistentHeaderError(f"section {index} has negative size", offset=off)

    view = SectionReader(source, sh["offset"], sh["size"])
    fields = dict(
        type=sh["type"],
        flags=sh["flags"],
        addr=sh["addr"],
        offset=sh["offset"],
        size=sh["size"],
        file_size=sh["size"],
        link=sh["link"],
        info=sh["info"],
        addralign=sh["addralign"],
        entsize=sh["entsize"],
    )
    if not sh["flags"] & C.SHF_COMPRESSED:
        return Section(SectionHeader(**fields), view, name_offset=sh["name"])

    ch = layout.unpack_chdr(view.read_exact(0, layout.chdr.size))
    fields["size"] = ch["size"]
    fields["addralign"] = ch["addralign"]
    return Section(
        SectionHeader(**fields),
        view,
        name_offset=sh["name"],
        compression_type=ch["type"],
        compression_offset=layout.chdr.size,
    )


def read_section_headers(
    source: RandomAccessSource,
    reader: SectionReader,
    layout: ElfLayout,
    tables: TableLayout,
) -> list[Section]:
    """Decode the section header table and resolve section names.

    Raises:
        TruncatedInputError: If a header or compression header is cut short.
        InconsistentHeaderError: On negative offsets/sizes, an undersized
            entry size, or a name table that is not ``SHT_STRTAB``.
        InvalidExtendedConventionError: See :func:`resolve_extended_counts`.
        UnresolvableStringError: If a section name offset is outside the
            name table.
    """
    shnum, shstrndx = resolve_extended_counts(reader, layout, tables)

    if shnum > 0 and tables.shentsize < layout.section.size:
        raise InconsistentHeaderError(
            f"section header entry size {tables.shentsize} is below "
            f"{layout.section.size}"
        )

    sections = [
        _decode_section(i, tables.shoff + i * tables.shentsize, source, reader, layout)
        for i in range(shnum)
    ]
    logger.debug("Decoded %d section headers", len(sections))

    if not sections or shstrndx == C.SHN_UNDEF:
        return sections

    names = sections[shstrndx]
    if names.type != C.SHT_STRTAB:
        raise InconsistentHeaderError(
            f"section name table {shstrndx} has type "
            f"{C.section_type_name(names.type)}, not STRTAB"
        )
    blob = names.data()
    for section in sections:
        section._set_name(get_string(blob, section.name_offset))

    return sections
