"""
ELF Data Models
================

Pydantic models for the decoded, width-independent view of an ELF file.
Both the 32-bit and 64-bit on-disk layouts normalise into these models,
with every address, offset and size widened to a Python ``int`` holding
the 64-bit value.

All models are frozen: once the decoder hands a model out it never
changes.  The only late-bound field, :attr:`SectionHeader.name`, is
filled in by replacing the model during the decoder's finalisation pass.

References:
    - TIS Committee. (1995). Executable and Linkable Format (ELF) Specification.
    - System V ABI, generic ABI, chapter 4 "Object Files".
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from elfscope.core import constants as C


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Identification / file header
# ---------------------------------------------------------------------------

class Identification(_Frozen):
    """The 16-byte ``e_ident`` block.

    Attributes:
        elf_class: ``ELFCLASS32`` (1) or ``ELFCLASS64`` (2).
        data: ``ELFDATA2LSB`` (1) or ``ELFDATA2MSB`` (2).
        version: Identification version; always ``EV_CURRENT``.
        osabi: OS/ABI tag, stored as-is.
        abi_version: ABI version, stored as-is.
        raw: The 16 identification bytes as read.
    """
    elf_class: int
    data: int
    version: int
    osabi: int = 0
    abi_version: int = 0
    raw: bytes = b""

    @property
    def bits(self) -> int:
        return 64 if self.elf_class == C.ELFCLASS64 else 32

    @property
    def byte_order(self) -> str:
        return "little" if self.data == C.ELFDATA2LSB else "big"


class FileHeader(_Frozen):
    """Retained file header fields.

    Table offsets, entry sizes and counts are consumed while decoding and
    are not part of the retained header.
    """
    ident: Identification
    type: int = C.ET_NONE
    machine: int = C.EM_NONE
    entry: int = 0
    flags: int = 0

    @property
    def elf_class(self) -> int:
        return self.ident.elf_class

    @property
    def byte_order(self) -> str:
        return self.ident.byte_order


# ---------------------------------------------------------------------------
# Program header
# ---------------------------------------------------------------------------

class ProgHeader(_Frozen):
    """A single program header (segment descriptor)."""
    type: int = C.PT_NULL
    flags: int = 0
    offset: int = Field(default=0, ge=0)
    vaddr: int = 0
    paddr: int = 0
    filesz: int = Field(default=0, ge=0)
    memsz: int = 0
    align: int = 0


# ---------------------------------------------------------------------------
# Section header
# ---------------------------------------------------------------------------

class SectionHeader(_Frozen):
    """A single section header.

    ``size`` is the logical (uncompressed) size; ``file_size`` is what the
    section occupies on disk.  They differ only for sections flagged
    ``SHF_COMPRESSED``, where ``size`` and ``addralign`` come from the
    compression header.
    """
    name: str = ""
    type: int = C.SHT_NULL
    flags: int = 0
    addr: int = 0
    offset: int = Field(default=0, ge=0)
    size: int = 0
    file_size: int = Field(default=0, ge=0)
    link: int = 0
    info: int = 0
    addralign: int = 0
    entsize: int = 0

    @property
    def is_compressed(self) -> bool:
        return bool(self.flags & C.SHF_COMPRESSED)


# ---------------------------------------------------------------------------
# Symbol
# ---------------------------------------------------------------------------

class Symbol(_Frozen):
    """An entry in a symbol table section.

    ``version`` and ``library`` are populated only for dynamic symbols
    whose GNU versioning data could be resolved; otherwise both are empty.
    """
    name: str = ""
    info: int = 0
    other: int = 0
    section: int = C.SHN_UNDEF
    value: int = 0
    size: int = 0
    version: str = ""
    library: str = ""

    @property
    def bind(self) -> int:
        return self.info >> 4

    @property
    def type(self) -> int:
        return self.info & 0xF

    @property
    def visibility(self) -> int:
        return self.other & 0x3
