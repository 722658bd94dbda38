"""
Program header table reader.

Each of ``phnum`` slots at ``phoff + i * phentsize`` is decoded with the
width-specific layout, normalised into a :class:`ProgHeader` and bound to
a view over the segment's file bytes.  Segments are not cross-checked
against sections here.
"""

from __future__ import annotations

import logging

from elfscope.core.elffile import Prog
from elfscope.core.errors import InconsistentHeaderError
from elfscope.core.models import ProgHeader
from elfscope.core.source import RandomAccessSource, SectionReader
from elfscope.parsers.header import TableLayout
from elfscope.parsers.layouts import ElfLayout, as_signed64

logger = logging.getLogger(__name__)


def read_program_headers(
    source: RandomAccessSource,
    reader: SectionReader,
    layout: ElfLayout,
    tables: TableLayout,
) -> list[Prog]:
    """Decode the whole program header table.

    Raises:
        TruncatedInputError: If an entry lies past the end of the source.
        InconsistentHeaderError: If an entry's offset or file size is
            negative as a signed 64-bit value.
    """
    progs: list[Prog] = []
    for i in range(tables.phnum):
        off = tables.phoff + i * tables.phentsize
        ph = layout.unpack_prog(reader.read_exact(off, layout.prog.size))

        if as_signed64(ph["offset"]) < 0:
            raise InconsistentHeaderError(
                f"program header {i} has negative offset", offset=off
            )
        if as_signed64(ph["filesz"]) < 0:
            raise InconsistentHeaderError(
                f"program header {i} has negative file size", offset=off
            )

        header = ProgHeader(**ph)
        progs.append(Prog(header, SectionReader(source, header.offset, header.filesz)))

    logger.debug("Decoded %d program headers", len(progs))
    return progs
