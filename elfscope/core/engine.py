"""
ElfScope Engine
================

Glue between a path on disk and the decoder.  The engine applies the
configured input limits, runs the decode inside a timed logging scope and
records failures with their :class:`FailureKind` before re-raising them.

Pipeline:
    1. Check the file exists and is within ``max_file_size``
    2. Open and decode it (:func:`open_elf`)
    3. Optionally flatten the result into an :class:`ElfSummary`
"""

from __future__ import annotations

from pathlib import Path

from shared.config import ScopeConfig
from shared.logger import ScopeLogger

from elfscope.core.elffile import ElfFile
from elfscope.core.errors import ELFDecodeError
from elfscope.core.summary import ElfSummary, summarize
from elfscope.parsers.elf_parser import open_elf


class ElfScopeEngine:
    """Decode ELF files from disk with logging and input limits.

    Usage::

        engine = ElfScopeEngine()
        summary = engine.inspect("/usr/bin/true")
        print(summary.header.machine, len(summary.sections))

    Or keep the decoded file for content access::

        with engine.load("/usr/bin/true") as elf:
            text = elf.section(".text").data()
    """

    def __init__(
        self,
        config: ScopeConfig | None = None,
        logger: ScopeLogger | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: ElfScope configuration.  Defaults are used if not provided.
            logger: Logger instance.  A new one is created if not provided.
        """
        self._config: ScopeConfig = config or ScopeConfig()
        self._logger: ScopeLogger = logger or ScopeLogger(
            "engine",
            log_level=self._config.global_settings.log_level,
            log_file=self._config.global_settings.log_file,
            json_logs=self._config.global_settings.log_json,
        )

    @property
    def config(self) -> ScopeConfig:
        return self._config

    # ------------------------------------------------------------------ #
    #  Entry points
    # ------------------------------------------------------------------ #

    def load(self, file_path: str | Path) -> ElfFile:
        """Open and decode *file_path*.

        The caller owns the returned :class:`ElfFile` and must close it.

        Raises:
            FileNotFoundError: If the path does not exist.
            ValueError: If the file exceeds ``max_file_size``.
            ELFDecodeError: If the file is not a valid ELF file.
        """
        path = Path(file_path)
        if not path.is_file():
            self._logger.error("File not found: %s", path)
            raise FileNotFoundError(f"File not found: {path}")

        file_size = path.stat().st_size
        max_size = self._config.elfscope.max_file_size
        if file_size > max_size:
            message = f"File too large: {file_size:,} bytes (max: {max_size:,} bytes)"
            self._logger.error(message)
            raise ValueError(message)

        with self._logger.operation("decode"):
            try:
                with self._logger.timed(f"decode {path.name}"):
                    elf = open_elf(path)
            except ELFDecodeError as exc:
                self._logger.error(
                    "Decode failed for %s: %s",
                    path,
                    exc,
                    kind=exc.kind.value,
                    offset=exc.offset,
                )
                raise

        self._logger.info(
            "Decoded %s: %d segments, %d sections",
            path, len(elf.progs), len(elf.sections),
        )
        return elf

    def inspect(self, file_path: str | Path) -> ElfSummary:
        """Decode *file_path* and return its :class:`ElfSummary`.

        The file is closed before returning.

        Raises:
            FileNotFoundError, ValueError, ELFDecodeError: As for :meth:`load`,
                plus symbol and content failures raised while summarising.
        """
        settings = self._config.elfscope
        with self.load(file_path) as elf, self._logger.operation("summarize"):
            try:
                summary = summarize(
                    elf,
                    str(Path(file_path).resolve()),
                    include_unnamed=settings.show_unnamed_symbols,
                    include_dynamic=settings.include_dynamic_symbols,
                )
            except ELFDecodeError as exc:
                self._logger.error(
                    "Summary failed for %s: %s", file_path, exc, kind=exc.kind.value,
                )
                raise

        self._logger.info(
            "Summarised %s: %d symbols, %d dynamic symbols",
            file_path, len(summary.symbols), len(summary.dynamic_symbols),
        )
        return summary
