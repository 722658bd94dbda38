"""
ElfScope Parsers
=================

Record layouts and the table decoders that build an ElfFile:
identification and file header, program headers, section headers,
string tables, section content streams and symbol tables.

Entry points live in :mod:`elfscope.parsers.elf_parser`.
"""
