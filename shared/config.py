"""
ElfScope Configuration Management
==================================

Centralized configuration for the ElfScope toolkit using Python
dataclasses and TOML-based persistence.

Configuration is kept separate from code: every tunable lives in a
dataclass with a sensible default and may be overridden from a TOML
file with ``[global]`` and ``[elfscope]`` tables.

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
    - PEP 681 -- Data Class Transforms (2022).
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "elfscope.toml"


# ========================== Tool-Specific Configs ==========================


@dataclass(frozen=False, slots=True)
class ElfScopeConfig:
    """Configuration for the ELF inspection tool.

    Controls input limits and which parts of the decoded model the
    reporting layer lists.
    """

    max_file_size: int = 536_870_912  # 512 MiB
    show_unnamed_symbols: bool = False
    include_dynamic_symbols: bool = True
    output_format: str = "table"


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Global settings: logging verbosity and output directory."""

    log_level: str = "INFO"
    log_file: str | None = None
    log_json: bool = False
    output_dir: str = "output"
    debug: bool = False


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class ScopeConfig:
    """Master configuration aggregating tool-specific and global settings.

    Usage:
        >>> config = ScopeConfig.load()                  # from default path
        >>> config = ScopeConfig.load("custom.toml")     # from custom path
        >>> config.elfscope.max_file_size
        536870912
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    elfscope: ElfScopeConfig = field(default_factory=ElfScopeConfig)

    # ------------------------------------------------------------------ #
    #  TOML Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def load(cls, path: str | Path | None = None) -> ScopeConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``elfscope.toml`` in the
        project root.  Missing keys fall back to dataclass defaults.

        Args:
            path: Filesystem path to a TOML configuration file.

        Returns:
            A fully-populated :class:`ScopeConfig` instance.

        Raises:
            FileNotFoundError: If the specified path does not exist
                *and* was explicitly provided by the caller.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            elfscope=cls._build_section(ElfScopeConfig, raw.get("elfscope", {})),
        )

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate a dataclass *cls* using only the keys it declares.

        Unknown keys in the TOML source are ignored so that newer config
        files keep loading on older code.
        """
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)

