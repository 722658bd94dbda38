"""
ElfScope -- ELF Structure Inspector
====================================

Decodes ELF object files (executables, shared libraries, relocatable
objects and core files) into a validated, read-only model.

Capabilities:
    - ELF32 and ELF64 in either byte order
    - Program and section header tables, including the extended section
      count and extended string table index conventions
    - Section content access with transparent zlib / zstd decompression
    - Static and dynamic symbol tables with GNU symbol versions
    - Rich console tables and JSON reports

Modules:
    - elfscope.core: Decoded model, errors, sources, engine
    - elfscope.parsers: Record layouts and the table decoders
    - elfscope.output: Console and JSON rendering
    - elfscope.cli: Click command-line interface

References:
    - TIS Committee. (1995). Executable and Linkable Format (ELF) Specification.
    - System V Application Binary Interface, generic ABI.
    - Linux Standard Base Core Specification, "Symbol Versioning".
"""

__version__ = "1.0.0"

from elfscope.core.errors import ELFDecodeError, FailureKind
from elfscope.parsers.elf_parser import open_elf, parse_elf

__all__ = [
    "ELFDecodeError",
    "FailureKind",
    "open_elf",
    "parse_elf",
]
