# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors, settings)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from rich.console import Console

from ..config import ConfigError, FinderSettings, load_settings
from ..logging import configure_logging
from ..logging import fail as core_fail
from ..logging import ok as core_ok
from ..logging import warn as core_warn

DEFAULT_PYPROJECT: Final[Path] = Path("pyproject.toml")
EXIT_NOT_FOUND: Final[int] = 1
EXIT_DISCOVERY_FAILED: Final[int] = 2


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around console helpers respecting CLI emoji and colour settings."""

    console: Console
    use_emoji: bool
    use_color: bool

    def fail(self, message: str) -> None:
        """Log a failure message."""

        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        """Log a warning message."""

        core_warn(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        """Log a success message."""

        core_ok(message, use_emoji=self.use_emoji, use_color=self.use_color)


def build_cli_logger(*, emoji: bool, no_color: bool = False, verbose: bool = False) -> CLILogger:
    """Return a ``CLILogger`` and route library logging through Rich.

    Args:
        emoji: Whether output may include emoji glyphs.
        no_color: Whether terminal colour output should be disabled.
        verbose: Whether debug records from the library should be shown.

    Returns:
        CLILogger: Logger bound to a dedicated Rich console.
    """

    configure_logging(verbose=verbose, use_color=not no_color)
    console = Console(no_color=no_color, highlight=False)
    return CLILogger(console=console, use_emoji=emoji, use_color=not no_color)


def resolve_settings(config: Path | None, *, home: Path | None = None) -> FinderSettings:
    """Load settings from ``config`` (or ``./pyproject.toml``) and the environment.

    Args:
        config: Explicit ``pyproject.toml`` path supplied on the command line.
        home: Installation root override.

    Returns:
        FinderSettings: Layered settings.

    Raises:
        CLIError: If the configuration is invalid.
    """

    pyproject = config if config is not None else DEFAULT_PYPROJECT
    if config is not None and not config.is_file():
        raise CLIError(f"configuration file {config} not found")
    try:
        return load_settings(pyproject=pyproject, overrides={"home": home})
    except ConfigError as exc:
        raise CLIError(f"invalid configuration: {exc}") from exc


__all__ = [
    "CLIError",
    "CLILogger",
    "EXIT_DISCOVERY_FAILED",
    "EXIT_NOT_FOUND",
    "build_cli_logger",
    "resolve_settings",
]
