"""
ElfScope Console Output
========================

Rich-powered terminal display for an :class:`ElfSummary`: the file
header panel, program and section header tables, the section-to-segment
mapping, and symbol listings.

Uses the ScopeConsole abstraction for consistent styling.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from shared.console import ScopeConsole

from elfscope import __version__
from elfscope.core.summary import (
    ElfSummary,
    HeaderSummary,
    MappingEntry,
    SectionRow,
    SegmentRow,
    SymbolRow,
)


# ---------------------------------------------------------------------------
# Colour helpers
# ---------------------------------------------------------------------------

_SEGMENT_TYPE_COLOURS: dict[str, str] = {
    "LOAD": "bright_green",
    "DYNAMIC": "bright_magenta",
    "INTERP": "bright_yellow",
    "TLS": "bright_blue",
    "GNU_STACK": "dim",
    "GNU_RELRO": "yellow",
}

_BIND_COLOURS: dict[str, str] = {
    "GLOBAL": "bright_green",
    "WEAK": "yellow",
    "LOCAL": "dim",
}


def _flag_colour(flags: str) -> str:
    """Executable content stands out, writable content is highlighted."""
    if "X" in flags or "E" in flags:
        return "bright_red"
    if "W" in flags:
        return "yellow"
    return "white"


def _table(*, show_lines: bool = False) -> Table:
    return Table(
        border_style="bright_cyan",
        header_style="bold bright_magenta",
        show_lines=show_lines,
        padding=(0, 1),
    )


# ---------------------------------------------------------------------------
# ElfScopeConsoleOutput
# ---------------------------------------------------------------------------

class ElfScopeConsoleOutput:
    """Rich terminal display for decoded ELF files.

    Usage::

        output = ElfScopeConsoleOutput()
        output.display(summary)
    """

    def __init__(self, console: ScopeConsole | None = None) -> None:
        """Initialise the output renderer.

        Args:
            console: Optional ScopeConsole instance.  A new one is
                     created if not provided.
        """
        self._console: ScopeConsole = console or ScopeConsole()

    def display(
        self,
        summary: ElfSummary,
        *,
        header: bool = True,
        segments: bool = True,
        sections: bool = True,
        symbols: bool = True,
        dynamic: bool = True,
    ) -> None:
        """Display the selected parts of *summary*."""
        self._console.banner(__version__)

        if header:
            self.display_header(summary.header)
        if segments:
            self.display_segments(summary.segments, summary.header)
            self.display_mapping(summary.mapping)
        if sections:
            self.display_sections(summary.sections)
            if not segments:
                self.display_mapping(summary.mapping)
        if symbols:
            self.display_symbols("Symbol Table", summary.symbols)
        if dynamic:
            self.display_symbols("Dynamic Symbol Table", summary.dynamic_symbols)

        self._console.divider()

    def display_header(self, info: HeaderSummary) -> None:
        """Display the identification and file header panel."""
        lines: list[str] = [
            f"[bold]File:[/bold]         {escape(info.path)}",
            f"[bold]Magic:[/bold]        {info.magic}",
            f"[bold]Class:[/bold]        {info.elf_class}",
            f"[bold]Data:[/bold]         {info.data}",
            f"[bold]Version:[/bold]      {info.version}",
            f"[bold]OS/ABI:[/bold]       {info.osabi}",
            f"[bold]ABI Version:[/bold]  {info.abi_version}",
            f"[bold]Byte Order:[/bold]   {info.byte_order}",
            f"[bold]Type:[/bold]         {info.type}",
            f"[bold]Machine:[/bold]      {info.machine}",
            f"[bold]Entry Point:[/bold]  0x{info.entry:x}",
            f"[bold]Flags:[/bold]        0x{info.flags:x}",
        ]
        panel = Panel(
            "\n".join(lines),
            title="[bold bright_cyan]ELF Header[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(1, 2),
        )
        self._console.rich.print(panel)
        self._console.blank()

    def display_segments(self, rows: list[SegmentRow], info: HeaderSummary) -> None:
        """Display the program header table."""
        self._console.section("Program Headers")
        self._console.print(
            f"ELF file type is [bold]{info.type}[/bold], "
            f"entry point 0x{info.entry:x}, {len(rows)} program headers"
        )
        self._console.blank()
        if not rows:
            self._console.info("There are no program headers in this file.")
            self._console.blank()
            return

        tbl = _table()
        tbl.add_column("#", style="dim", width=4, justify="right")
        tbl.add_column("Type", min_width=10)
        tbl.add_column("Flags")
        tbl.add_column("Offset", justify="right")
        tbl.add_column("VAddr", justify="right")
        tbl.add_column("PAddr", justify="right")
        tbl.add_column("FileSiz", justify="right")
        tbl.add_column("MemSiz", justify="right")
        tbl.add_column("Align", justify="right")

        for row in rows:
            type_colour = _SEGMENT_TYPE_COLOURS.get(row.type, "white")
            flag_colour = _flag_colour(row.flags)
            tbl.add_row(
                str(row.index),
                f"[{type_colour}]{row.type}[/{type_colour}]",
                f"[{flag_colour}]{row.flags}[/{flag_colour}]",
                f"0x{row.offset:x}",
                f"0x{row.vaddr:x}",
                f"0x{row.paddr:x}",
                f"{row.filesz:,}",
                f"{row.memsz:,}",
                f"0x{row.align:x}",
            )

        self._console.rich.print(tbl)
        self._console.blank()

    def display_sections(self, rows: list[SectionRow]) -> None:
        """Display the section header table."""
        self._console.section("Section Headers")
        if not rows:
            self._console.info("There are no sections in this file.")
            self._console.blank()
            return

        tbl = _table()
        tbl.add_column("#", style="dim", width=4, justify="right")
        tbl.add_column("Name", style="bold", min_width=12)
        tbl.add_column("Type")
        tbl.add_column("Flags")
        tbl.add_column("Addr", justify="right")
        tbl.add_column("Offset", justify="right")
        tbl.add_column("Size", justify="right")
        tbl.add_column("Link", justify="right")
        tbl.add_column("Info", justify="right")
        tbl.add_column("Align", justify="right")
        tbl.add_column("EntSize", justify="right")

        for row in rows:
            size = f"{row.size:,}"
            if row.compression:
                size += f" [dim]({row.compression}, {row.file_size:,} on disk)[/dim]"
            flag_colour = _flag_colour(row.flags)
            tbl.add_row(
                str(row.index),
                escape(row.name) or "[dim]<null>[/dim]",
                row.type,
                f"[{flag_colour}]{row.flags}[/{flag_colour}]",
                f"0x{row.addr:x}",
                f"0x{row.offset:x}",
                size,
                str(row.link),
                str(row.info),
                str(row.addralign),
                str(row.entsize),
            )

        self._console.rich.print(tbl)
        self._console.print(
            "[dim]Key: W write, A alloc, X execute, M merge, S strings, "
            "I info, L link order, G group, T TLS, C compressed[/dim]"
        )
        self._console.blank()

    def display_mapping(self, mapping: list[MappingEntry]) -> None:
        """Display which segment each allocated section falls into."""
        self._console.section("Section to Segment Mapping")
        if not mapping:
            self._console.info("No allocated sections fall inside a segment.")
            self._console.blank()
            return

        by_segment: dict[int, tuple[str, list[str]]] = {}
        for entry in mapping:
            _, names = by_segment.setdefault(
                entry.segment_index, (entry.segment_type, [])
            )
            names.append(escape(entry.section))

        rows = []
        for index in sorted(by_segment):
            seg_type, names = by_segment[index]
            colour = _SEGMENT_TYPE_COLOURS.get(seg_type, "white")
            rows.append((index, f"[{colour}]{seg_type}[/{colour}]", " ".join(names)))

        self._console.table(
            "",
            ["Segment", "Type", "Sections"],
            rows,
            styles=["dim", "", ""],
            justify=["right", "left", "left"],
        )
        self._console.blank()

    def display_symbols(self, title: str, rows: list[SymbolRow]) -> None:
        """Display a symbol table listing."""
        self._console.section(title)
        if not rows:
            self._console.info(f"No entries in the {title.lower()}.")
            self._console.blank()
            return

        tbl = _table()
        tbl.add_column("Num", style="dim", justify="right")
        tbl.add_column("Value", justify="right")
        tbl.add_column("Size", justify="right")
        tbl.add_column("Type")
        tbl.add_column("Bind")
        tbl.add_column("Vis")
        tbl.add_column("Ndx", justify="right")
        tbl.add_column("Name", style="bold", overflow="fold")
        # Resolved versions stay whole on narrow terminals.
        version_width = max(len(row.version) for row in rows)
        library_width = max(len(row.library) for row in rows)
        tbl.add_column("Version", no_wrap=True, min_width=version_width)
        tbl.add_column("Library", no_wrap=True, min_width=library_width)

        for row in rows:
            bind_colour = _BIND_COLOURS.get(row.bind, "white")
            tbl.add_row(
                str(row.index),
                f"0x{row.value:x}",
                str(row.size),
                row.type,
                f"[{bind_colour}]{row.bind}[/{bind_colour}]",
                row.visibility,
                row.section,
                escape(row.name),
                escape(row.version),
                escape(row.library),
            )

        self._console.rich.print(tbl)
        self._console.print(f"[dim]{len(rows)} symbols[/dim]")
        self._console.blank()
