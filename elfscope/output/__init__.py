"""
ElfScope Output Module
=======================

Console display and JSON report generation for decoded ELF files.
"""

from elfscope.output.console import ElfScopeConsoleOutput
from elfscope.output.report import ElfScopeReportGenerator

__all__ = [
    "ElfScopeConsoleOutput",
    "ElfScopeReportGenerator",
]
