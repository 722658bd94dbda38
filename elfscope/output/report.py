"""
ElfScope Report Generator
==========================

Writes an :class:`ElfSummary` as a structured JSON document for machine
consumption.  Rows are dumped through pydantic so the JSON field names
match the report models one to one.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from elfscope import __version__
from elfscope.core.summary import ElfSummary


class ElfScopeReportGenerator:
    """Generate JSON reports from decoded ELF summaries.

    Usage::

        generator = ElfScopeReportGenerator()
        generator.generate_json(summary, "report.json")
    """

    def build(self, summary: ElfSummary) -> dict[str, Any]:
        """Return the report as a JSON-compatible dictionary."""
        return {
            "report_type": "elfscope_elf_structure",
            "version": __version__,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "header": summary.header.model_dump(mode="json"),
            "program_headers": [row.model_dump(mode="json") for row in summary.segments],
            "section_headers": [row.model_dump(mode="json") for row in summary.sections],
            "section_to_segment": [
                entry.model_dump(mode="json") for entry in summary.mapping
            ],
            "symbols": {
                "count": len(summary.symbols),
                "items": [row.model_dump(mode="json") for row in summary.symbols],
            },
            "dynamic_symbols": {
                "count": len(summary.dynamic_symbols),
                "items": [row.model_dump(mode="json") for row in summary.dynamic_symbols],
            },
        }

    def render_json(self, summary: ElfSummary) -> str:
        """Serialise the report to an indented JSON string."""
        return json.dumps(self.build(summary), indent=2, ensure_ascii=False, default=str)

    def generate_json(self, summary: ElfSummary, output_path: str | Path) -> str:
        """Write the JSON report to *output_path*.

        Returns:
            The absolute path of the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(self.render_json(summary))

        return str(path.resolve())
