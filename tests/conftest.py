"""
Shared pytest fixtures for ElfScope tests.

ELF inputs are synthesised by the reference encoder in ``elf_builder``
rather than compiled, so every test is deterministic and runs without a
toolchain.  ``sample_bytes`` is parametrised across both widths and both
byte orders.
"""
import logging

import pytest

from elf_builder import build_sample

VARIANTS = [(64, "<"), (64, ">"), (32, "<"), (32, ">")]


@pytest.fixture(params=VARIANTS, ids=["elf64le", "elf64be", "elf32le", "elf32be"])
def variant(request):
    """(bits, endian) for each supported layout."""
    return request.param


@pytest.fixture
def sample_bytes(variant):
    """The sample executable in every layout."""
    bits, endian = variant
    return build_sample(bits, endian)


@pytest.fixture
def elf64_bytes():
    """The sample executable as little-endian ELF64."""
    return build_sample(64, "<")


@pytest.fixture
def sample_path(tmp_path, elf64_bytes):
    """The little-endian ELF64 sample written to disk."""
    path = tmp_path / "sample.elf"
    path.write_bytes(elf64_bytes)
    return path


@pytest.fixture
def not_elf(tmp_path):
    """A file that is not ELF at all."""
    path = tmp_path / "not_elf.txt"
    path.write_text("this is just a text file, not an ELF binary\n")
    return path


@pytest.fixture(autouse=True)
def _reset_elfscope_loggers():
    """ScopeLogger attaches handlers to process-wide loggers; drop them after each test."""
    yield
    for name in ("elfscope.cli", "elfscope.engine", "elfscope.parsers", "elfscope.core", "elfscope.test"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
