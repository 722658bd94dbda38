"""
ELF Decode Entry Points
========================

:func:`parse_elf` runs the whole decode against any random-access source:

    identification -> file header -> program headers -> section headers
    -> section names

and returns a complete :class:`ElfFile` or raises an
:class:`~elfscope.core.errors.ELFDecodeError`; a partially decoded file
is never returned.  :func:`open_elf` does the same for a path and hands
ownership of the opened file to the result.

Example::

    from elfscope.parsers.elf_parser import open_elf

    with open_elf("/usr/bin/true") as elf:
        print(elf.header.machine, len(elf.sections))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from elfscope.core import constants as C
from elfscope.core.elffile import ElfFile
from elfscope.core.source import FileSource, SectionReader, as_source
from elfscope.parsers.header import read_file_header, read_identification
from elfscope.parsers.sections import read_section_headers
from elfscope.parsers.segments import read_program_headers

logger = logging.getLogger(__name__)


def parse_elf(source: Any, *, closer: Any = None) -> ElfFile:
    """Decode an ELF file from *source*.

    Args:
        source:  A :class:`RandomAccessSource`, a bytes-like object or a
                 seekable binary file object.
        closer:  Object whose ``close()`` is called by :meth:`ElfFile.close`.

    Raises:
        ELFDecodeError: Any subclass, depending on what is wrong with the input.
        TypeError: If *source* cannot be read from.
    """
    src = as_source(source)
    reader = SectionReader(src)

    ident = read_identification(reader)
    header, tables, layout = read_file_header(reader, ident)
    progs = read_program_headers(src, reader, layout, tables)
    sections = read_section_headers(src, reader, layout, tables)

    elf = ElfFile(header, sections, progs, layout, closer=closer)
    logger.debug(
        "Parsed %s %s %s: %d segments, %d sections",
        C.class_name(header.elf_class),
        C.type_name(header.type),
        C.machine_name(header.machine),
        len(progs),
        len(sections),
    )
    return elf


def open_elf(path: str | Path) -> ElfFile:
    """Open and decode the ELF file at *path*.

    The returned :class:`ElfFile` owns the file handle; close it (or use
    it as a context manager) when done.  On a decode failure the file is
    closed before the error propagates.

    Raises:
        OSError: If the file cannot be opened.
        ELFDecodeError: If the file is not a valid ELF file.
    """
    source = FileSource(path)
    try:
        return parse_elf(source, closer=source)
    except BaseException:
        source.close()
        raise
