"""
Symbol Table Decoder
=====================

Decodes ``SHT_SYMTAB`` / ``SHT_DYNSYM`` sections into :class:`Symbol`
records.  Every entry is kept, the null symbol at index 0 included, so a
symbol's position in the returned list is its symbol table index.

Dynamic symbols additionally get a version and, for imported symbols, the
library that provides it.  These come from the GNU versioning sections:

    - ``SHT_GNU_VERSYM``  -- one ``u16`` version index per dynamic symbol
    - ``SHT_GNU_VERNEED`` -- versions required from other objects
                             (``Elf_Verneed`` + ``Elf_Vernaux`` chains)
    - ``SHT_GNU_VERDEF``  -- versions defined by this object
                             (``Elf_Verdef`` + ``Elf_Verdaux`` chains)

Versioning data is optional and resolved best-effort: when it is absent
or malformed, ``version`` and ``library`` stay empty.
"""

from __future__ import annotations

import logging
import struct
from typing import TYPE_CHECKING, Iterable

from elfscope.core import constants as C
from elfscope.core.errors import BadEntrySizeError, ELFDecodeError
from elfscope.core.models import Symbol
from elfscope.parsers.strtab import get_string

if TYPE_CHECKING:
    from elfscope.core.elffile import ElfFile, Section
    from elfscope.parsers.layouts import ElfLayout

logger = logging.getLogger(__name__)

# Record sizes are identical for both widths
_VERNEED_SIZE = 16
_VERNAUX_SIZE = 16
_VERDEF_SIZE = 20
_VERDAUX_SIZE = 8


def decode_symbols(elf: ElfFile, section: Section) -> list[Symbol]:
    """Decode every entry of a symbol table section.

    Args:
        elf:      The aggregate *section* belongs to.
        section:  A symbol table section (normally ``SHT_SYMTAB`` or
                  ``SHT_DYNSYM``).

    Raises:
        BadEntrySizeError: If ``sh_entsize`` differs from the fixed record
            size, or the content is not a whole number of records.
        UnresolvableStringError: If the linked string table is missing or
            a name offset lies outside it.
    """
    layout = elf.layout
    record = layout.sym.size
    if section.header.entsize != record:
        raise BadEntrySizeError(
            f"symbol table {section.name!r} has entry size "
            f"{section.header.entsize}, expected {record}"
        )

    data = section.data()
    if len(data) % record:
        raise BadEntrySizeError(
            f"symbol table {section.name!r} size {len(data)} is not a "
            f"multiple of {record}"
        )

    strtab = elf.string_table(section.header.link)
    versions: dict[int, tuple[str, str]] = {}
    versym = b""
    if section.type == C.SHT_DYNSYM:
        versions = _gnu_versions(elf)
        if versions:
            versym = _versym_table(elf)

    symbols: list[Symbol] = []
    for index, offset in enumerate(range(0, len(data), record)):
        raw = layout.unpack_sym(data, offset)
        version, library = _version_of(layout, versym, versions, index)
        symbols.append(Symbol(
            name=get_string(strtab, raw["name"]),
            info=raw["info"],
            other=raw["other"],
            section=raw["shndx"],
            value=raw["value"],
            size=raw["size"],
            version=version,
            library=library,
        ))

    logger.debug("Decoded %d symbols from %s", len(symbols), section.name)
    return symbols


def named_symbols(symbols: Iterable[Symbol]) -> list[Symbol]:
    """Drop entries with an empty name, for listings."""
    return [sym for sym in symbols if sym.name]


# ---------------------------------------------------------------------------
# GNU symbol versioning
# ---------------------------------------------------------------------------

def _version_of(
    layout: ElfLayout,
    versym: bytes,
    versions: dict[int, tuple[str, str]],
    index: int,
) -> tuple[str, str]:
    offset = index * 2
    if offset + 2 > len(versym):
        return "", ""
    ndx = layout.u16(versym, offset) & C.VERSYM_VERSION
    # 0 and 1 are the local and global base indices, not real versions
    if ndx <= C.VER_NDX_GLOBAL:
        return "", ""
    return versions.get(ndx, ("", ""))


def _versym_table(elf: ElfFile) -> bytes:
    table = elf.section_by_type(C.SHT_GNU_VERSYM)
    if table is None:
        return b""
    try:
        return table.data()
    except ELFDecodeError as exc:
        logger.debug("Ignoring unreadable version symbol table: %s", exc)
        return b""


def _gnu_versions(elf: ElfFile) -> dict[int, tuple[str, str]]:
    """Map version index to ``(version, library)``; empty when unavailable."""
    versions: dict[int, tuple[str, str]] = {}
    try:
        verdef = elf.section_by_type(C.SHT_GNU_VERDEF)
        if verdef is not None:
            _read_verdef(elf, verdef, versions)
        verneed = elf.section_by_type(C.SHT_GNU_VERNEED)
        if verneed is not None:
            _read_verneed(elf, verneed, versions)
    except (ELFDecodeError, struct.error) as exc:
        logger.debug("Ignoring malformed symbol versioning data: %s", exc)
        return {}
    return versions


def _read_verneed(
    elf: ElfFile,
    section: Section,
    versions: dict[int, tuple[str, str]],
) -> None:
    layout = elf.layout
    data = section.data()
    strtab = elf.string_table(section.header.link)
    # Bounded walk; a cyclic vn_next chain must not loop forever
    remaining = len(data) // _VERNEED_SIZE

    offset = 0
    while remaining > 0 and offset + _VERNEED_SIZE <= len(data):
        remaining -= 1
        vn_version = layout.u16(data, offset)
        if vn_version != C.VER_NEED_CURRENT:
            break
        vn_cnt = layout.u16(data, offset + 2)
        library = get_string(strtab, layout.u32(data, offset + 4))
        vn_aux = layout.u32(data, offset + 8)
        vn_next = layout.u32(data, offset + 12)

        aux = offset + vn_aux
        for _ in range(vn_cnt):
            if aux + _VERNAUX_SIZE > len(data):
                break
            other = layout.u16(data, aux + 6) & C.VERSYM_VERSION
            name = get_string(strtab, layout.u32(data, aux + 8))
            versions[other] = (name, library)
            vna_next = layout.u32(data, aux + 12)
            if vna_next == 0:
                break
            aux += vna_next

        if vn_next == 0:
            break
        offset += vn_next


def _read_verdef(
    elf: ElfFile,
    section: Section,
    versions: dict[int, tuple[str, str]],
) -> None:
    layout = elf.layout
    data = section.data()
    strtab = elf.string_table(section.header.link)
    remaining = len(data) // _VERDEF_SIZE

    offset = 0
    while remaining > 0 and offset + _VERDEF_SIZE <= len(data):
        remaining -= 1
        vd_version = layout.u16(data, offset)
        if vd_version != C.VER_DEF_CURRENT:
            break
        vd_flags = layout.u16(data, offset + 2)
        vd_ndx = layout.u16(data, offset + 4) & C.VERSYM_VERSION
        vd_aux = layout.u32(data, offset + 12)
        vd_next = layout.u32(data, offset + 16)

        # The base entry names the object itself, not a version
        aux = offset + vd_aux
        if not vd_flags & C.VER_FLG_BASE and aux + _VERDAUX_SIZE <= len(data):
            versions[vd_ndx] = (get_string(strtab, layout.u32(data, aux)), "")

        if vd_next == 0:
            break
        offset += vd_next
