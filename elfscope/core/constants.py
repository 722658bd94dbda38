"""
ELF Constants
==============

Numeric constants of the Executable and Linkable Format together with
the name tables used when rendering decoded values.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V Application Binary Interface, generic ABI (gABI), 2013 draft.
    - Linux man page: elf(5).
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Identification
# ---------------------------------------------------------------------------

ELF_MAGIC: bytes = b"\x7fELF"
EI_NIDENT: int = 16

EI_CLASS: int = 4
EI_DATA: int = 5
EI_VERSION: int = 6
EI_OSABI: int = 7
EI_ABIVERSION: int = 8

# ELF Class (32-bit vs 64-bit)
ELFCLASSNONE: int = 0
ELFCLASS32: int = 1
ELFCLASS64: int = 2

_CLASS_NAMES: dict[int, str] = {
    ELFCLASSNONE: "ELFCLASSNONE",
    ELFCLASS32: "ELF32",
    ELFCLASS64: "ELF64",
}

# Data encoding (endianness)
ELFDATANONE: int = 0
ELFDATA2LSB: int = 1  # Little-endian
ELFDATA2MSB: int = 2  # Big-endian

_DATA_NAMES: dict[int, str] = {
    ELFDATANONE: "ELFDATANONE",
    ELFDATA2LSB: "2's complement, little endian",
    ELFDATA2MSB: "2's complement, big endian",
}

# Version
EV_NONE: int = 0
EV_CURRENT: int = 1

_VERSION_NAMES: dict[int, str] = {
    EV_NONE: "EV_NONE",
    EV_CURRENT: "1 (current)",
}

# OS/ABI
ELFOSABI_NONE: int = 0
ELFOSABI_HPUX: int = 1
ELFOSABI_NETBSD: int = 2
ELFOSABI_LINUX: int = 3
ELFOSABI_SOLARIS: int = 6
ELFOSABI_AIX: int = 7
ELFOSABI_IRIX: int = 8
ELFOSABI_FREEBSD: int = 9
ELFOSABI_OPENBSD: int = 12
ELFOSABI_ARM: int = 97
ELFOSABI_STANDALONE: int = 255

_OSABI_NAMES: dict[int, str] = {
    ELFOSABI_NONE: "UNIX - System V",
    ELFOSABI_HPUX: "UNIX - HP-UX",
    ELFOSABI_NETBSD: "UNIX - NetBSD",
    ELFOSABI_LINUX: "UNIX - GNU",
    ELFOSABI_SOLARIS: "UNIX - Solaris",
    ELFOSABI_AIX: "UNIX - AIX",
    ELFOSABI_IRIX: "UNIX - IRIX",
    ELFOSABI_FREEBSD: "UNIX - FreeBSD",
    ELFOSABI_OPENBSD: "UNIX - OpenBSD",
    ELFOSABI_ARM: "ARM",
    ELFOSABI_STANDALONE: "Standalone App",
}

# ---------------------------------------------------------------------------
# File header
# ---------------------------------------------------------------------------

ET_NONE: int = 0
ET_REL: int = 1   # Relocatable
ET_EXEC: int = 2  # Executable
ET_DYN: int = 3   # Shared object / PIE
ET_CORE: int = 4  # Core dump

_ET_NAMES: dict[int, str] = {
    ET_NONE: "NONE",
    ET_REL: "REL (Relocatable file)",
    ET_EXEC: "EXEC (Executable file)",
    ET_DYN: "DYN (Shared object file)",
    ET_CORE: "CORE (Core file)",
}

EM_NONE: int = 0
EM_SPARC: int = 2
EM_386: int = 3
EM_68K: int = 4
EM_MIPS: int = 8
EM_PPC: int = 20
EM_PPC64: int = 21
EM_S390: int = 22
EM_ARM: int = 40
EM_SPARCV9: int = 43
EM_IA_64: int = 50
EM_X86_64: int = 62
EM_AARCH64: int = 183
EM_RISCV: int = 243
EM_BPF: int = 247
EM_LOONGARCH: int = 258

_EM_NAMES: dict[int, str] = {
    EM_NONE: "None",
    EM_SPARC: "SPARC",
    EM_386: "Intel 80386",
    EM_68K: "Motorola 68000",
    EM_MIPS: "MIPS R3000",
    EM_PPC: "PowerPC",
    EM_PPC64: "PowerPC64",
    EM_S390: "IBM S/390",
    EM_ARM: "ARM",
    EM_SPARCV9: "SPARC v9",
    EM_IA_64: "Intel IA-64",
    EM_X86_64: "Advanced Micro Devices X86-64",
    EM_AARCH64: "AArch64",
    EM_RISCV: "RISC-V",
    EM_BPF: "Linux BPF",
    EM_LOONGARCH: "LoongArch",
}

# ---------------------------------------------------------------------------
# Section header
# ---------------------------------------------------------------------------

# Special section indices
SHN_UNDEF: int = 0
SHN_LORESERVE: int = 0xFF00
SHN_ABS: int = 0xFFF1
SHN_COMMON: int = 0xFFF2
SHN_XINDEX: int = 0xFFFF

_SHN_NAMES: dict[int, str] = {
    SHN_UNDEF: "UND",
    SHN_ABS: "ABS",
    SHN_COMMON: "COM",
    SHN_XINDEX: "XINDEX",
}

SHT_NULL: int = 0
SHT_PROGBITS: int = 1
SHT_SYMTAB: int = 2
SHT_STRTAB: int = 3
SHT_RELA: int = 4
SHT_HASH: int = 5
SHT_DYNAMIC: int = 6
SHT_NOTE: int = 7
SHT_NOBITS: int = 8
SHT_REL: int = 9
SHT_SHLIB: int = 10
SHT_DYNSYM: int = 11
SHT_INIT_ARRAY: int = 14
SHT_FINI_ARRAY: int = 15
SHT_PREINIT_ARRAY: int = 16
SHT_GROUP: int = 17
SHT_SYMTAB_SHNDX: int = 18
SHT_GNU_ATTRIBUTES: int = 0x6FFFFFF5
SHT_GNU_HASH: int = 0x6FFFFFF6
SHT_GNU_LIBLIST: int = 0x6FFFFFF7
SHT_GNU_VERDEF: int = 0x6FFFFFFD
SHT_GNU_VERNEED: int = 0x6FFFFFFE
SHT_GNU_VERSYM: int = 0x6FFFFFFF

_SHT_NAMES: dict[int, str] = {
    SHT_NULL: "NULL",
    SHT_PROGBITS: "PROGBITS",
    SHT_SYMTAB: "SYMTAB",
    SHT_STRTAB: "STRTAB",
    SHT_RELA: "RELA",
    SHT_HASH: "HASH",
    SHT_DYNAMIC: "DYNAMIC",
    SHT_NOTE: "NOTE",
    SHT_NOBITS: "NOBITS",
    SHT_REL: "REL",
    SHT_SHLIB: "SHLIB",
    SHT_DYNSYM: "DYNSYM",
    SHT_INIT_ARRAY: "INIT_ARRAY",
    SHT_FINI_ARRAY: "FINI_ARRAY",
    SHT_PREINIT_ARRAY: "PREINIT_ARRAY",
    SHT_GROUP: "GROUP",
    SHT_SYMTAB_SHNDX: "SYMTAB_SHNDX",
    SHT_GNU_ATTRIBUTES: "GNU_ATTRIBUTES",
    SHT_GNU_HASH: "GNU_HASH",
    SHT_GNU_LIBLIST: "GNU_LIBLIST",
    SHT_GNU_VERDEF: "VERDEF",
    SHT_GNU_VERNEED: "VERNEED",
    SHT_GNU_VERSYM: "VERSYM",
}

SHF_WRITE: int = 0x1
SHF_ALLOC: int = 0x2
SHF_EXECINSTR: int = 0x4
SHF_MERGE: int = 0x10
SHF_STRINGS: int = 0x20
SHF_INFO_LINK: int = 0x40
SHF_LINK_ORDER: int = 0x80
SHF_OS_NONCONFORMING: int = 0x100
SHF_GROUP: int = 0x200
SHF_TLS: int = 0x400
SHF_COMPRESSED: int = 0x800

# Single-letter keys in readelf order
_SHF_LETTERS: tuple[tuple[int, str], ...] = (
    (SHF_WRITE, "W"),
    (SHF_ALLOC, "A"),
    (SHF_EXECINSTR, "X"),
    (SHF_MERGE, "M"),
    (SHF_STRINGS, "S"),
    (SHF_INFO_LINK, "I"),
    (SHF_LINK_ORDER, "L"),
    (SHF_OS_NONCONFORMING, "O"),
    (SHF_GROUP, "G"),
    (SHF_TLS, "T"),
    (SHF_COMPRESSED, "C"),
)

# Compression header types
ELFCOMPRESS_ZLIB: int = 1
ELFCOMPRESS_ZSTD: int = 2

_COMPRESS_NAMES: dict[int, str] = {
    ELFCOMPRESS_ZLIB: "ZLIB",
    ELFCOMPRESS_ZSTD: "ZSTD",
}

# ---------------------------------------------------------------------------
# Program header
# ---------------------------------------------------------------------------

PT_NULL: int = 0
PT_LOAD: int = 1
PT_DYNAMIC: int = 2
PT_INTERP: int = 3
PT_NOTE: int = 4
PT_SHLIB: int = 5
PT_PHDR: int = 6
PT_TLS: int = 7
PT_GNU_EH_FRAME: int = 0x6474E550
PT_GNU_STACK: int = 0x6474E551
PT_GNU_RELRO: int = 0x6474E552
PT_GNU_PROPERTY: int = 0x6474E553

_PT_NAMES: dict[int, str] = {
    PT_NULL: "NULL",
    PT_LOAD: "LOAD",
    PT_DYNAMIC: "DYNAMIC",
    PT_INTERP: "INTERP",
    PT_NOTE: "NOTE",
    PT_SHLIB: "SHLIB",
    PT_PHDR: "PHDR",
    PT_TLS: "TLS",
    PT_GNU_EH_FRAME: "GNU_EH_FRAME",
    PT_GNU_STACK: "GNU_STACK",
    PT_GNU_RELRO: "GNU_RELRO",
    PT_GNU_PROPERTY: "GNU_PROPERTY",
}

PF_X: int = 0x1  # Execute
PF_W: int = 0x2  # Write
PF_R: int = 0x4  # Read

# ---------------------------------------------------------------------------
# Symbols
# ---------------------------------------------------------------------------

STB_LOCAL: int = 0
STB_GLOBAL: int = 1
STB_WEAK: int = 2
STB_GNU_UNIQUE: int = 10

_STB_NAMES: dict[int, str] = {
    STB_LOCAL: "LOCAL",
    STB_GLOBAL: "GLOBAL",
    STB_WEAK: "WEAK",
    STB_GNU_UNIQUE: "UNIQUE",
}

STT_NOTYPE: int = 0
STT_OBJECT: int = 1
STT_FUNC: int = 2
STT_SECTION: int = 3
STT_FILE: int = 4
STT_COMMON: int = 5
STT_TLS: int = 6
STT_GNU_IFUNC: int = 10

_STT_NAMES: dict[int, str] = {
    STT_NOTYPE: "NOTYPE",
    STT_OBJECT: "OBJECT",
    STT_FUNC: "FUNC",
    STT_SECTION: "SECTION",
    STT_FILE: "FILE",
    STT_COMMON: "COMMON",
    STT_TLS: "TLS",
    STT_GNU_IFUNC: "IFUNC",
}

STV_DEFAULT: int = 0
STV_INTERNAL: int = 1
STV_HIDDEN: int = 2
STV_PROTECTED: int = 3

_STV_NAMES: dict[int, str] = {
    STV_DEFAULT: "DEFAULT",
    STV_INTERNAL: "INTERNAL",
    STV_HIDDEN: "HIDDEN",
    STV_PROTECTED: "PROTECTED",
}

# GNU symbol versioning
VER_NDX_LOCAL: int = 0
VER_NDX_GLOBAL: int = 1
VERSYM_HIDDEN: int = 0x8000
VERSYM_VERSION: int = 0x7FFF
VER_DEF_CURRENT: int = 1
VER_NEED_CURRENT: int = 1
VER_FLG_BASE: int = 0x1


# ---------------------------------------------------------------------------
# Name helpers
# ---------------------------------------------------------------------------

def class_name(value: int) -> str:
    return _CLASS_NAMES.get(value, f"<unknown: {value:#x}>")


def data_name(value: int) -> str:
    return _DATA_NAMES.get(value, f"<unknown: {value:#x}>")


def version_name(value: int) -> str:
    return _VERSION_NAMES.get(value, f"{value} <unknown>")


def osabi_name(value: int) -> str:
    return _OSABI_NAMES.get(value, f"<unknown: {value:#x}>")


def type_name(value: int) -> str:
    return _ET_NAMES.get(value, f"<unknown>: {value:#x}")


def machine_name(value: int) -> str:
    return _EM_NAMES.get(value, f"<unknown>: {value:#x}")


def section_type_name(value: int) -> str:
    return _SHT_NAMES.get(value, f"{value:#x}")


def segment_type_name(value: int) -> str:
    return _PT_NAMES.get(value, f"{value:#x}")


def compression_name(value: int) -> str:
    return _COMPRESS_NAMES.get(value, f"{value:#x}")


def bind_name(value: int) -> str:
    return _STB_NAMES.get(value, f"<{value}>")


def symbol_type_name(value: int) -> str:
    return _STT_NAMES.get(value, f"<{value}>")


def visibility_name(value: int) -> str:
    return _STV_NAMES.get(value, f"<{value}>")


def section_index_name(value: int) -> str:
    """Render a symbol's ``st_shndx`` the way ``readelf -s`` does."""
    return _SHN_NAMES.get(value, str(value))


def section_flags_str(flags: int) -> str:
    """Convert a section flags bitmask to readelf-style letters, e.g. ``"WAX"``."""
    letters = "".join(letter for bit, letter in _SHF_LETTERS if flags & bit)
    return letters or "-"


def segment_flags_str(flags: int) -> str:
    """Convert program header flags to a string like ``"RWX"``."""
    parts: list[str] = []
    if flags & PF_R:
        parts.append("R")
    if flags & PF_W:
        parts.append("W")
    if flags & PF_X:
        parts.append("X")
    return "".join(parts) if parts else "-"
