"""
ElfScope Shared Module
======================

Configuration, structured logging and console presentation shared by
the ElfScope packages.
"""

from shared.config import ScopeConfig

__all__ = ["ScopeConfig"]
