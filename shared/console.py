"""
ElfScope Console Interface
===========================

Rich-powered console abstraction providing a single presentation layer
for ElfScope output.

The class wraps :class:`rich.console.Console` and adds convenience
methods for banners, section rules, coloured status messages and tables
with consistent styling.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

_SCOPE_THEME = Theme(
    {
        "scope.banner": "bold bright_cyan",
        "scope.section": "bold bright_magenta",
        "scope.success": "bold green",
        "scope.warning": "bold yellow",
        "scope.error": "bold red",
        "scope.info": "bold bright_blue",
        "scope.dim": "dim white",
    }
)

_TAGLINE = "ELF structure inspector"


class ScopeConsole:
    """Unified console interface for ElfScope output.

    Usage::

        con = ScopeConsole()
        con.section("Section Headers")
        con.table("Sections", ["Name", "Type"], rows)
        con.success("Decoded 31 sections")
    """

    def __init__(
        self,
        *,
        quiet: bool = False,
        record: bool = False,
        width: int | None = None,
    ) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output (useful in library / test mode).
            record: Enable Rich recording for text / HTML export.
            width:  Fixed console width; ``None`` autodetects.
        """
        self._console = Console(
            theme=_SCOPE_THEME,
            quiet=quiet,
            record=record,
            highlight=False,
            width=width,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Banner / section header
    # ------------------------------------------------------------------ #

    def banner(self, version: str = "1.0.0") -> None:
        """Display the ElfScope banner panel."""
        panel = Panel(
            f"[scope.banner]ElfScope[/scope.banner]  "
            f"[scope.dim]{_TAGLINE} | v{version}[/scope.dim]",
            border_style="bright_cyan",
            padding=(0, 2),
        )
        self._console.print(panel)

    def section(self, title: str) -> None:
        """Print a prominent section rule."""
        self._console.rule(
            f"  {title}  ",
            style="scope.section",
            characters="─",
        )
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Message helpers
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(
            f"[scope.success][✔] SUCCESS:[/scope.success] {message}"
        )

    def warning(self, message: str) -> None:
        self._console.print(
            f"[scope.warning][⚠] WARNING:[/scope.warning] {message}"
        )

    def error(self, message: str) -> None:
        self._console.print(
            f"[scope.error][✘] ERROR:[/scope.error] {message}"
        )

    def info(self, message: str) -> None:
        self._console.print(
            f"[scope.info][ℹ] INFO:[/scope.info] {message}"
        )

    # ------------------------------------------------------------------ #
    #  Table display
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
        justify: Sequence[str] | None = None,
    ) -> None:
        """Render a styled Rich table.

        Args:
            title:    Table title.
            columns:  Column header labels.
            rows:     Iterable of row tuples; each element is stringified.
            caption:  Optional footer caption.
            styles:   Optional per-column Rich style strings.
            justify:  Optional per-column justification (``"left"``,
                      ``"right"``, ``"center"``).
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            just = justify[idx] if justify and idx < len(justify) else "left"
            tbl.add_column(col_name, style=style, justify=just)  # type: ignore[arg-type]

        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))

        self._console.print(tbl)

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Proxy to :meth:`rich.console.Console.print`."""
        self._console.print(*args, **kwargs)

    def blank(self, count: int = 1) -> None:
        """Print *count* blank lines."""
        for _ in range(count):
            self._console.print()

    def divider(self, style: str = "dim") -> None:
        """Print a thin horizontal rule."""
        self._console.rule(style=style)

    def export_text(self) -> str:
        """Export recorded console output as plain text (requires ``record=True``)."""
        return self._console.export_text()
