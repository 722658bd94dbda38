"""
test_content - section content access.

Tests verify:
  - NOBITS sections read as zeros without touching the file.
  - zlib and zstd compressed sections inflate to their declared size,
    with size/addralign taken from the compression header.
  - Decompressing streams support forward and backward seeks.
  - Unknown compression types and corrupt payloads surface on access,
    not during the initial decode.
"""
import io

import pytest

from elfscope import parse_elf
from elfscope.core import constants as C
from elfscope.core.errors import (
    CorruptCompressedDataError,
    FailureKind,
    UnsupportedCompressionError,
)
from elfscope.core.source import BytesSource, SectionReader
from elfscope.parsers.content import DecompressingStream, ZeroStream

from elf_builder import ElfImage

PLAINTEXT = b"".join(b"line %04d of a compressed debug section\n" % i for i in range(400))


def _compressed_elf(ctype, bits=64, endian="<", payload=None):
    img = ElfImage(bits, endian)
    if payload is None:
        img.add_compressed_section(".debug_info", PLAINTEXT, ctype, addralign=4)
    else:
        img.add_section(".debug_info", C.SHT_PROGBITS, payload, flags=C.SHF_COMPRESSED)
    return parse_elf(img.build()).section(".debug_info")


class TestNobits:
    """SHT_NOBITS content."""

    def test_bss_reads_zeros(self, sample_bytes):
        bss = parse_elf(sample_bytes).section(".bss")

        assert bss.size == 0x40
        assert bss.data() == bytes(0x40)
        assert bss.read_at(0x30, 0x20) == bytes(0x10)
        with bss.open() as stream:
            assert stream.read() == bytes(0x40)

    def test_zero_stream_seek(self):
        stream = ZeroStream(10)

        assert stream.seek(8) == 8
        assert stream.read(5) == b"\x00\x00"
        assert stream.read(5) == b""
        assert stream.seek(-3, io.SEEK_END) == 7


class TestCompressedSections:
    """SHF_COMPRESSED content."""

    @pytest.mark.parametrize("ctype", [C.ELFCOMPRESS_ZLIB, C.ELFCOMPRESS_ZSTD])
    def test_inflates_to_plaintext(self, variant, ctype):
        bits, endian = variant
        section = _compressed_elf(ctype, bits, endian)

        assert section.header.is_compressed
        assert section.compression_type == ctype
        assert section.size == len(PLAINTEXT)
        assert section.header.file_size < section.size
        assert section.header.addralign == 4
        assert section.data() == PLAINTEXT

    def test_sample_debug_str(self, sample_bytes):
        section = parse_elf(sample_bytes).section(".debug_str")

        assert section.data() == b"debug string\x00" * 20

    def test_positioned_reads_unsupported(self):
        section = _compressed_elf(C.ELFCOMPRESS_ZLIB)

        assert section.raw_reader is None
        with pytest.raises(io.UnsupportedOperation):
            section.read_at(0, 16)

    @pytest.mark.parametrize("ctype", [C.ELFCOMPRESS_ZLIB, C.ELFCOMPRESS_ZSTD])
    def test_stream_seeks(self, ctype):
        """Forward seeks discard output; backward seeks restart the inflater."""
        section = _compressed_elf(ctype)

        with section.open() as stream:
            assert stream.read(10) == PLAINTEXT[:10]
            stream.seek(5000)
            assert stream.tell() == 5000
            assert stream.read(20) == PLAINTEXT[5000:5020]
            stream.seek(100)
            assert stream.read(20) == PLAINTEXT[100:120]
            stream.seek(-10, io.SEEK_END)
            assert stream.read() == PLAINTEXT[-10:]
            assert stream.read(1) == b""

    def test_independent_streams(self):
        section = _compressed_elf(C.ELFCOMPRESS_ZLIB)

        with section.open() as first, section.open() as second:
            first.seek(200)
            assert second.read(5) == PLAINTEXT[:5]
            assert first.read(5) == PLAINTEXT[200:205]

    def test_unsupported_compression(self):
        """Unknown ch_type decodes fine and fails when the content is opened."""
        img = ElfImage()
        section = _compressed_elf(None, payload=img.chdr(0x7F, 16, 1) + b"\x00" * 16)

        assert section.compression_type == 0x7F
        with pytest.raises(UnsupportedCompressionError) as info:
            section.open()
        assert info.value.kind is FailureKind.UNSUPPORTED_COMPRESSION
        with pytest.raises(UnsupportedCompressionError):
            section.data()

    @pytest.mark.parametrize("ctype", [C.ELFCOMPRESS_ZLIB, C.ELFCOMPRESS_ZSTD])
    def test_corrupt_payload(self, ctype):
        img = ElfImage()
        section = _compressed_elf(None, payload=img.chdr(ctype, 64, 1) + b"not compressed data" * 4)

        with pytest.raises(CorruptCompressedDataError) as info:
            section.data()
        assert info.value.kind is FailureKind.CORRUPT_COMPRESSED_DATA

    def test_payload_shorter_than_declared(self):
        img = ElfImage()
        blob = img.compress(b"short", C.ELFCOMPRESS_ZLIB)
        # Claim more uncompressed bytes than the stream holds
        header = img.chdr(C.ELFCOMPRESS_ZLIB, 4096, 1)
        section = _compressed_elf(None, payload=header + blob[img.chdrsize:])

        with pytest.raises(CorruptCompressedDataError):
            section.data()

    def test_truncated_payload(self):
        img = ElfImage()
        blob = img.compress(PLAINTEXT, C.ELFCOMPRESS_ZLIB)
        section = _compressed_elf(None, payload=blob[: len(blob) // 2])

        with pytest.raises(CorruptCompressedDataError):
            section.data()


class TestDecompressingStream:
    """DecompressingStream over an arbitrary byte range."""

    def test_over_bytes_source(self):
        import zlib

        payload = SectionReader(BytesSource(b"junk" + zlib.compress(PLAINTEXT)), 4)
        stream = DecompressingStream(payload, C.ELFCOMPRESS_ZLIB, len(PLAINTEXT))

        assert stream.read() == PLAINTEXT

    def test_rejects_unknown_type_immediately(self):
        with pytest.raises(UnsupportedCompressionError):
            DecompressingStream(SectionReader(BytesSource(b"")), 3, 0)

    def test_empty_section(self):
        import zlib

        stream = DecompressingStream(
            SectionReader(BytesSource(zlib.compress(b""))), C.ELFCOMPRESS_ZLIB, 0,
        )
        assert stream.read() == b""

    def test_payload_opened_on_first_read(self):
        import zlib

        class Recording(BytesSource):
            def __init__(self, data):
                super().__init__(data)
                self.reads = 0

            def read_at(self, offset, size):
                self.reads += 1
                return super().read_at(offset, size)

        source = Recording(zlib.compress(PLAINTEXT))
        stream = DecompressingStream(SectionReader(source), C.ELFCOMPRESS_ZLIB, len(PLAINTEXT))

        assert source.reads == 0
        assert stream.read(10) == PLAINTEXT[:10]
        assert source.reads > 0
        assert stream.read() == PLAINTEXT[10:]
