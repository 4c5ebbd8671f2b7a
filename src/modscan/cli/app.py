# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point for inspecting module catalogs."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import typer

from .. import of, of_installed
from ..config import FinderSettings
from ..errors import CatalogAccessDenied, ImageLayoutError, ModuleFindError
from ..finder import ModuleFinder
from ..reference import ModuleReference
from .rendering import build_descriptor_table, build_modules_table, reference_to_dict, references_to_json
from .shared import EXIT_DISCOVERY_FAILED, EXIT_NOT_FOUND, CLIError, CLILogger, build_cli_logger, resolve_settings

ResultT = TypeVar("ResultT")

app = typer.Typer(
    name="modscan",
    help="Discover modules on module paths and in installed runtime images.",
    no_args_is_help=True,
)

_PATHS_ARGUMENT = typer.Argument(..., metavar="PATH...", help="Module path entries, searched in order.")
_CONFIG_OPTION = typer.Option(None, "--config", "-c", help="pyproject.toml holding a [tool.modscan] table.")
_JSON_OPTION = typer.Option(False, "--json", help="Emit JSON instead of a table.")
_VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Show debug logging from the scanner.")
_NO_COLOR_OPTION = typer.Option(False, "--no-color", help="Disable coloured output.")
_NO_EMOJI_OPTION = typer.Option(False, "--no-emoji", help="Disable emoji output.")


@app.command("list")
def list_modules(
    paths: list[Path] = _PATHS_ARGUMENT,
    config: Path | None = _CONFIG_OPTION,
    as_json: bool = _JSON_OPTION,
    verbose: bool = _VERBOSE_OPTION,
    no_color: bool = _NO_COLOR_OPTION,
    no_emoji: bool = _NO_EMOJI_OPTION,
) -> None:
    """List every module found on the module path."""

    logger = build_cli_logger(emoji=not no_emoji, no_color=no_color, verbose=verbose)
    finder = _module_path_finder(paths, config, logger)
    references = _run(finder.find_all, logger)
    if as_json:
        typer.echo(references_to_json(references))
        return
    logger.console.print(build_modules_table(references, title="Module path"))
    _report_count(references, logger)


@app.command("describe")
def describe_module(
    name: str = typer.Argument(..., help="Module name to describe."),
    paths: list[Path] = _PATHS_ARGUMENT,
    config: Path | None = _CONFIG_OPTION,
    as_json: bool = _JSON_OPTION,
    verbose: bool = _VERBOSE_OPTION,
    no_color: bool = _NO_COLOR_OPTION,
    no_emoji: bool = _NO_EMOJI_OPTION,
) -> None:
    """Describe one module found on the module path."""

    logger = build_cli_logger(emoji=not no_emoji, no_color=no_color, verbose=verbose)
    finder = _module_path_finder(paths, config, logger)
    reference = _run(lambda: finder.find(name), logger)
    if reference is None:
        logger.fail(f"module {name} not found")
        raise typer.Exit(code=EXIT_NOT_FOUND)
    if as_json:
        typer.echo(json.dumps(reference_to_dict(reference), indent=2, sort_keys=True))
        return
    logger.console.print(build_descriptor_table(reference))


@app.command("image")
def list_image(
    home: Path | None = typer.Option(None, "--home", help="Runtime installation root (defaults to MODSCAN_HOME)."),
    config: Path | None = _CONFIG_OPTION,
    as_json: bool = _JSON_OPTION,
    verbose: bool = _VERBOSE_OPTION,
    no_color: bool = _NO_COLOR_OPTION,
    no_emoji: bool = _NO_EMOJI_OPTION,
) -> None:
    """List the modules of an installed runtime image."""

    logger = build_cli_logger(emoji=not no_emoji, no_color=no_color, verbose=verbose)
    settings = _settings_or_exit(config, logger, home=home)
    if settings.home is None:
        logger.fail("no installation root given; pass --home or set MODSCAN_HOME")
        raise typer.Exit(code=EXIT_DISCOVERY_FAILED)
    try:
        finder = of_installed(settings.home, settings=settings)
    except (CatalogAccessDenied, ImageLayoutError) as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=EXIT_DISCOVERY_FAILED) from exc
    references = _run(finder.find_all, logger)
    if as_json:
        typer.echo(references_to_json(references))
        return
    logger.console.print(build_modules_table(references, title=f"Runtime image {settings.home}"))
    _report_count(references, logger)


def _module_path_finder(paths: list[Path], config: Path | None, logger: CLILogger) -> ModuleFinder:
    settings = _settings_or_exit(config, logger)
    return of(*paths, settings=settings)


def _settings_or_exit(config: Path | None, logger: CLILogger, *, home: Path | None = None) -> FinderSettings:
    try:
        return resolve_settings(config, home=home)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc


def _report_count(references: frozenset[ModuleReference], logger: CLILogger) -> None:
    if references:
        logger.ok(f"{len(references)} module(s) found")
    else:
        logger.warn("no modules found")


def _run(query: Callable[[], ResultT], logger: CLILogger) -> ResultT:
    try:
        return query()
    except ModuleFindError as exc:
        cause = f" ({exc.__cause__})" if exc.__cause__ is not None else ""
        logger.fail(f"{exc}{cause}")
        raise typer.Exit(code=EXIT_DISCOVERY_FAILED) from exc


def main() -> None:
    """Run the ``modscan`` console script."""

    app()


__all__ = ["app", "main"]
