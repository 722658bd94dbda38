"""
ElfScope CLI -- ELF Structure Inspector
=========================================

Click-based command-line interface.  Decodes one ELF file and prints the
requested parts of it: the file header, the program headers, the section
headers (each with the section-to-segment mapping) and the symbol tables.

Usage::

    # Everything (default)
    elfscope /usr/bin/ls

    # File header only
    elfscope /usr/bin/ls -H

    # Program and section headers
    elfscope /usr/bin/ls -P -S

    # Dynamic symbols with their versions and libraries
    elfscope /usr/bin/ls -D

    # JSON to stdout, or to a file
    elfscope /usr/bin/ls --json
    elfscope /usr/bin/ls --output report.json

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys
import tomllib
from pathlib import Path

import click

from shared.config import ScopeConfig
from shared.console import ScopeConsole
from shared.logger import ScopeLogger

from elfscope import __version__
from elfscope.core.engine import ElfScopeEngine
from elfscope.core.errors import ELFDecodeError
from elfscope.output.console import ElfScopeConsoleOutput
from elfscope.output.report import ElfScopeReportGenerator


# ---------------------------------------------------------------------------
# CLI command
# ---------------------------------------------------------------------------

@click.command("elfscope")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--file-header", "-H", "show_header", is_flag=True, help="Display the ELF file header.")
@click.option("--program-headers", "-P", "show_segments", is_flag=True, help="Display the program headers.")
@click.option("--section-headers", "-S", "show_sections", is_flag=True, help="Display the section headers.")
@click.option("--symbols", "-s", "show_symbols", is_flag=True, help="Display the symbol table.")
@click.option("--dynamic", "-D", "show_dynamic", is_flag=True, help="Display the dynamic symbol table.")
@click.option("--all", "-A", "show_all", is_flag=True, help="Display everything (default).")
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Output results as JSON to stdout.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write a JSON report to this path (relative paths go under output_dir).",
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to an elfscope.toml configuration file.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable verbose/debug output.",
)
@click.version_option(__version__, prog_name="elfscope")
def elfscope_cli(
    path: str,
    show_header: bool,
    show_segments: bool,
    show_sections: bool,
    show_symbols: bool,
    show_dynamic: bool,
    show_all: bool,
    json_output: bool,
    output_path: str | None,
    config_path: str | None,
    verbose: bool,
) -> None:
    """ElfScope -- ELF structure inspector.

    PATH is the ELF file to decode.  With no display option every part
    is shown.

    Examples:

    \b
        elfscope /usr/bin/ls -H -S
        elfscope libfoo.so --dynamic
        elfscope vmlinux --json > vmlinux.json
    """
    console = ScopeConsole()

    try:
        config = ScopeConfig.load(config_path)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        console.error(f"Cannot load configuration: {exc}")
        sys.exit(1)

    settings = config.global_settings
    log_level = "DEBUG" if verbose or settings.debug else settings.log_level
    logger = ScopeLogger(
        "cli",
        log_level=log_level,
        log_file=settings.log_file,
        json_logs=settings.log_json,
    )
    if verbose:
        # Decoder modules log through plain ``logging`` under these names
        ScopeLogger("parsers", log_level="DEBUG")
        ScopeLogger("core", log_level="DEBUG")

    engine = ElfScopeEngine(config=config, logger=logger)

    try:
        summary = engine.inspect(path)
    except ELFDecodeError as exc:
        console.error(f"Not a valid ELF file ({exc.kind.value}): {exc.message}")
        sys.exit(1)
    except (OSError, ValueError) as exc:
        console.error(str(exc))
        sys.exit(1)
    except KeyboardInterrupt:
        console.warning("Interrupted by user.")
        sys.exit(130)

    report_gen = ElfScopeReportGenerator()

    as_json = json_output or config.elfscope.output_format == "json"
    if as_json:
        click.echo(report_gen.render_json(summary))
    else:
        show_all = show_all or not any(
            (show_header, show_segments, show_sections, show_symbols, show_dynamic)
        )
        ElfScopeConsoleOutput(console=console).display(
            summary,
            header=show_all or show_header,
            segments=show_all or show_segments,
            sections=show_all or show_sections,
            symbols=show_all or show_symbols,
            dynamic=show_all or show_dynamic,
        )

    if output_path:
        # Relative report paths land in the configured output directory
        report_path = report_gen.generate_json(
            summary, Path(settings.output_dir) / output_path,
        )
        logger.info("JSON report saved: %s", report_path)
        if not as_json:
            console.success(f"JSON report saved: {report_path}")


# ---------------------------------------------------------------------------
# Module entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Entry point for ``python -m elfscope``."""
    elfscope_cli()


if __name__ == "__main__":
    main()
