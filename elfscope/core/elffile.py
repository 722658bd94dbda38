"""
Decoded ELF Aggregate
======================

:class:`ElfFile` is what :func:`elfscope.parsers.elf_parser.parse_elf`
returns: the file header plus index-stable tuples of :class:`Section`
and :class:`Prog`.  Sections and segments hold non-owning views into the
byte source they were decoded from, so an ``ElfFile`` must not outlive
its source.  When built by :func:`open_elf`, the file handle is owned by
the aggregate and released by :meth:`ElfFile.close`.

Symbol tables are not decoded up front; :meth:`ElfFile.symbols` and
:meth:`ElfFile.dynamic_symbols` decode them on demand.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Any, Iterator, Optional, Sequence

from elfscope.core import constants as C
from elfscope.core.errors import NoSymbolsError, UnresolvableStringError
from elfscope.core.models import FileHeader, ProgHeader, SectionHeader
from elfscope.core.source import SectionReader
from elfscope.parsers.content import DecompressingStream, ZeroStream
from elfscope.parsers.symbols import decode_symbols

if TYPE_CHECKING:
    from elfscope.core.models import Symbol
    from elfscope.parsers.layouts import ElfLayout


class Prog:
    """A program header bound to the file bytes it describes.

    Args:
        header: The decoded :class:`ProgHeader`.
        reader: View over ``[offset, offset + filesz)``.
    """

    def __init__(self, header: ProgHeader, reader: SectionReader) -> None:
        self.header = header
        self._reader = reader

    def __repr__(self) -> str:
        return (
            f"Prog({C.segment_type_name(self.header.type)}, "
            f"offset={self.header.offset:#x}, filesz={self.header.filesz:#x})"
        )

    def read_at(self, offset: int, size: int) -> bytes:
        """Positioned read relative to the segment's file offset."""
        return self._reader.read_at(offset, size)

    def open(self) -> io.RawIOBase:
        """Return a new sequential stream over the segment's file bytes."""
        return self._reader.open()

    def data(self) -> bytes:
        """Read the segment's file bytes in full.

        Raises:
            TruncatedInputError: If the source ends inside the segment.
        """
        return self._reader.read_exact(0, self.header.filesz)


class Section:
    """A section header bound to its content.

    Content is exposed according to the section kind:

        - ``SHT_NOBITS``: ``size`` zero bytes, nothing is read from disk.
        - uncompressed: the raw on-disk range.
        - ``SHF_COMPRESSED``: the payload after the compression header,
          inflated on demand.
    """

    def __init__(
        self,
        header: SectionHeader,
        reader: SectionReader,
        *,
        name_offset: int = 0,
        compression_type: int = 0,
        compression_offset: int = 0,
    ) -> None:
        self.header = header
        self._reader = reader
        self._name_offset = name_offset
        self._compression_type = compression_type
        self._compression_offset = compression_offset

    def __repr__(self) -> str:
        return (
            f"Section({self.header.name!r}, {C.section_type_name(self.header.type)}, "
            f"offset={self.header.offset:#x}, size={self.header.size:#x})"
        )

    # Shortcuts for the fields nearly every caller wants
    @property
    def name(self) -> str:
        return self.header.name

    @property
    def type(self) -> int:
        return self.header.type

    @property
    def size(self) -> int:
        return self.header.size

    @property
    def name_offset(self) -> int:
        """Raw ``sh_name`` offset into the section-name string table."""
        return self._name_offset

    @property
    def compression_type(self) -> int:
        """``ch_type`` of the compression header, 0 when uncompressed."""
        return self._compression_type

    @property
    def raw_reader(self) -> Optional[SectionReader]:
        """Random-access view of the content; ``None`` for compressed sections."""
        if self.header.is_compressed:
            return None
        return self._reader

    def _set_name(self, name: str) -> None:
        # Only called by the decoder before the aggregate is returned
        self.header = self.header.model_copy(update={"name": name})

    # ------------------------------------------------------------------ #
    #  Content access
    # ------------------------------------------------------------------ #

    def read_at(self, offset: int, size: int) -> bytes:
        """Positioned read of raw content.

        Raises:
            io.UnsupportedOperation: For compressed sections, whose content
                is only available sequentially through :meth:`open`.
        """
        if self.header.type == C.SHT_NOBITS:
            return bytes(max(0, min(size, self.header.size - offset)))
        if self.header.is_compressed:
            raise io.UnsupportedOperation(
                f"section {self.header.name!r} is compressed; use open()"
            )
        return self._reader.read_at(offset, size)

    def open(self) -> io.RawIOBase:
        """Return a new stream over the section's (uncompressed) content.

        Raises:
            UnsupportedCompressionError: For unknown compression types.
        """
        if self.header.type == C.SHT_NOBITS:
            return ZeroStream(self.header.size)
        if not self.header.is_compressed:
            return self._reader.open()
        payload = SectionReader(
            self._reader,
            self._compression_offset,
            self.header.file_size - self._compression_offset,
        )
        return DecompressingStream(payload, self._compression_type, self.header.size)

    def data(self) -> bytes:
        """Materialise the section's full uncompressed content.

        Raises:
            TruncatedInputError: If raw content runs past the end of the source.
            CorruptCompressedDataError: If compressed content fails to inflate.
        """
        if self.header.type == C.SHT_NOBITS:
            return bytes(self.header.size)
        if not self.header.is_compressed:
            return self._reader.read_exact(0, self.header.file_size)
        with self.open() as stream:
            return stream.read()


class ElfFile:
    """A fully decoded ELF file.

    Usage::

        with open_elf("/bin/ls") as elf:
            text = elf.section(".text")
            for sym in elf.dynamic_symbols():
                print(sym.name, sym.version, sym.library)
    """

    def __init__(
        self,
        header: FileHeader,
        sections: Sequence[Section],
        progs: Sequence[Prog],
        layout: ElfLayout,
        closer: Any = None,
    ) -> None:
        self.header = header
        self.sections: tuple[Section, ...] = tuple(sections)
        self.progs: tuple[Prog, ...] = tuple(progs)
        self.layout = layout
        self._closer = closer

    def __repr__(self) -> str:
        return (
            f"ElfFile({C.class_name(self.header.elf_class)}, "
            f"{C.machine_name(self.header.machine)}, "
            f"{len(self.sections)} sections, {len(self.progs)} segments)"
        )

    # ------------------------------------------------------------------ #
    #  Lifetime
    # ------------------------------------------------------------------ #

    def close(self) -> None:
        """Close the underlying file if this aggregate owns it."""
        if self._closer is not None:
            self._closer.close()
            self._closer = None

    def __enter__(self) -> ElfFile:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    #  Lookups
    # ------------------------------------------------------------------ #

    def iter_sections(self, type: Optional[int] = None) -> Iterator[Section]:
        """Yield sections in table order, optionally only those of *type*."""
        for section in self.sections:
            if type is None or section.type == type:
                yield section

    def section(self, name: str) -> Optional[Section]:
        """Return the first section called *name*, or ``None``."""
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def section_by_type(self, type: int) -> Optional[Section]:
        """Return the first section of the given ``SHT_*`` type, or ``None``."""
        return next(self.iter_sections(type), None)

    def string_table(self, link: int) -> bytes:
        """Return the content of the string table at section index *link*.

        Raises:
            UnresolvableStringError: If *link* does not name a string table.
        """
        if link <= C.SHN_UNDEF or link >= len(self.sections):
            raise UnresolvableStringError(f"invalid string table link {link}")
        table = self.sections[link]
        if table.type != C.SHT_STRTAB:
            raise UnresolvableStringError(
                f"section {link} ({table.name!r}) is "
                f"{C.section_type_name(table.type)}, not STRTAB"
            )
        return table.data()

    # ------------------------------------------------------------------ #
    #  Symbols
    # ------------------------------------------------------------------ #

    def symbols(self) -> list[Symbol]:
        """Decode the static symbol table (``SHT_SYMTAB``).

        Raises:
            NoSymbolsError: If the file has no ``SHT_SYMTAB`` section.
        """
        return self._symbols_of_type(C.SHT_SYMTAB)

    def dynamic_symbols(self) -> list[Symbol]:
        """Decode the dynamic symbol table (``SHT_DYNSYM``) with GNU versions.

        Raises:
            NoSymbolsError: If the file has no ``SHT_DYNSYM`` section.
        """
        return self._symbols_of_type(C.SHT_DYNSYM)

    def _symbols_of_type(self, sh_type: int) -> list[Symbol]:
        table = self.section_by_type(sh_type)
        if table is None:
            raise NoSymbolsError(
                f"no {C.section_type_name(sh_type)} section"
            )
        return decode_symbols(self, table)
