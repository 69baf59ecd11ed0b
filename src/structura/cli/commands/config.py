#!/usr/bin/env python
"""
Config command - Show the effective session configuration.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

from structura.cli.formatting.output import ConsoleOutput
from structura.cli.session import EXIT_ERROR, EXIT_OK
from structura.config import ConfigError, resolve_session_config, user_config_path


def run(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    output: Optional[ConsoleOutput] = None,
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> int:
    """Run the config command."""
    console = output or ConsoleOutput()
    try:
        config = resolve_session_config(overrides, environ=environ, config_path=config_path)
    except ConfigError as e:
        console.print_error(str(e))
        return EXIT_ERROR

    path = config_path or user_config_path()
    source = str(path) if path.exists() else f"{path} (not found)"
    console.print_dim(f"User config: {source}")
    console.print_table(
        "Configuration",
        ["Setting", "Value"],
        sorted(config.to_dict(mask_key=True).items()),
    )
    return EXIT_OK
