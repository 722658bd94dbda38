"""
ElfScope Structured Logger
===========================

Provides :class:`ScopeLogger`, the logging facade used by the CLI and the
decode engine.  Records go to stderr through Rich and, when a log file is
configured, to a rotating file as plain text or JSON lines.

Every record carries the component name and the current operation
(``decode``, ``summarize``), so a JSON log of a failed run can be
filtered down to the decode step and its failure ``kind`` and ``offset``.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.error": "bold red",
    }
)

_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Rotation limits for the optional log file
_MAX_LOG_BYTES = 10_485_760
_LOG_BACKUPS = 5


class _JSONFormatter(logging.Formatter):
    """One JSON object per record.

    ``tool_name`` and ``operation`` are copied from the record when set;
    keyword fields passed to a :class:`ScopeLogger` call land in ``extra``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for attr in ("tool_name", "operation"):
            val = getattr(record, attr, None)
            if val is not None:
                entry[attr] = val
        fields = getattr(record, "scope_extra", None)
        if fields:
            entry["extra"] = fields
        return json.dumps(entry, ensure_ascii=False, default=str)


class ScopeLogger:
    """Logger bound to one ElfScope component (``cli``, ``engine``, ...).

    The underlying stdlib logger is ``elfscope.<tool_name>``.  Building a
    second ScopeLogger for the same component replaces its handlers, which
    is how ``--verbose`` raises the decoder modules to DEBUG.

    Usage::

        log = ScopeLogger("engine", log_file="elfscope.log", json_logs=True)
        with log.operation("decode"), log.timed("decode a.out"):
            elf = parse_elf(source)
        log.error("Decode failed", kind="truncated-input", offset=64)
    """

    def __init__(
        self,
        tool_name: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        console_output: bool = True,
    ) -> None:
        self._tool_name = tool_name
        self._operation: str | None = None
        level = getattr(logging, log_level.upper(), logging.INFO)

        self._logger = logging.getLogger(f"elfscope.{tool_name}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        self._logger.handlers.clear()

        if console_output:
            self._logger.addHandler(
                RichHandler(
                    level=level,
                    console=Console(theme=_LOG_THEME, stderr=True),
                    show_path=False,
                    markup=False,
                )
            )

        if log_file is not None:
            file_path = Path(log_file)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(
                filename=str(file_path),
                maxBytes=_MAX_LOG_BYTES,
                backupCount=_LOG_BACKUPS,
                encoding="utf-8",
            )
            handler.setLevel(level)
            if json_logs:
                handler.setFormatter(_JSONFormatter())
            else:
                handler.setFormatter(
                    logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
                )
            self._logger.addHandler(handler)

    @contextmanager
    def operation(self, name: str) -> Iterator[ScopeLogger]:
        """Tag every record logged inside the block with ``operation=name``."""
        previous = self._operation
        self._operation = name
        try:
            yield self
        finally:
            self._operation = previous

    @contextmanager
    def timed(self, label: str) -> Iterator[None]:
        """Log the start of *label* and, on success, its elapsed time.

        A block left by an exception logs ``Aborted`` at DEBUG only; the
        caller reports the failure itself.
        """
        start = time.perf_counter()
        self.debug("Started: %s", label)
        try:
            yield
        except BaseException:
            self.debug("Aborted: %s (%.3f sec)", label, time.perf_counter() - start)
            raise
        elapsed = time.perf_counter() - start
        self.info("Completed: %s (%.3f sec)", label, elapsed, elapsed=round(elapsed, 6))

    def _log(self, level: int, msg: str, args: tuple[Any, ...], fields: dict[str, Any]) -> None:
        extra: dict[str, Any] = {
            "tool_name": self._tool_name,
            "operation": self._operation,
        }
        if fields:
            extra["scope_extra"] = fields
        self._logger.log(level, msg, *args, extra=extra)

    def debug(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, args, fields)

    def info(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.INFO, msg, args, fields)

    def error(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.ERROR, msg, args, fields)
