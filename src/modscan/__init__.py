# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Discover modules on module paths and in installed runtime images."""

from __future__ import annotations

import os
from pathlib import Path

from .automatic import AutomaticModuleSynthesizer, derive_identity
from .combinators import ConcatFinder, EmptyFinder
from .config import ConfigError, FinderSettings, load_settings
from .decoder import DescriptorDecoder, JsonDescriptorDecoder
from .descriptor import ModuleDescriptor, Provides, Requires, RequiresModifier
from .errors import (
    CatalogAccessDenied,
    DuplicateModuleError,
    ImageLayoutError,
    InvalidDescriptorError,
    ModscanError,
    ModuleFindError,
)
from .finder import ModuleFinder, ScanState
from .image import AllowAllGate, InstalledImageFinder, PermissionGate, installed_finder
from .path import ModulePathFinder
from .reference import ModuleReader, ModuleReference
from .version import ModuleVersion, parse_version

__all__ = [
    "AllowAllGate",
    "AutomaticModuleSynthesizer",
    "CatalogAccessDenied",
    "ConcatFinder",
    "ConfigError",
    "DescriptorDecoder",
    "DuplicateModuleError",
    "EmptyFinder",
    "FinderSettings",
    "ImageLayoutError",
    "InstalledImageFinder",
    "InvalidDescriptorError",
    "JsonDescriptorDecoder",
    "ModscanError",
    "ModuleDescriptor",
    "ModuleFindError",
    "ModuleFinder",
    "ModulePathFinder",
    "ModuleReader",
    "ModuleReference",
    "ModuleVersion",
    "PermissionGate",
    "Provides",
    "Requires",
    "RequiresModifier",
    "ScanState",
    "concat",
    "derive_identity",
    "empty",
    "load_settings",
    "of",
    "of_installed",
    "parse_version",
]


def of(*entries: str | os.PathLike[str], settings: FinderSettings | None = None) -> ModulePathFinder:
    """Return a finder over the module path ``entries``.

    No I/O happens until the finder is queried.

    Args:
        *entries: Packaged modules, exploded modules or directories of modules,
            searched in order.
        settings: Optional layout settings.

    Returns:
        ModulePathFinder: Finder over ``entries``.
    """

    return ModulePathFinder(entries, settings=settings)


def of_installed(
    home: str | os.PathLike[str],
    *,
    permission_gate: PermissionGate | None = None,
    settings: FinderSettings | None = None,
) -> ModuleFinder:
    """Return a finder over the runtime image installed at ``home``.

    Args:
        home: Installation root resolved by the caller.
        permission_gate: Gate consulted before the installation is inspected.
        settings: Optional layout settings.

    Returns:
        ModuleFinder: Finder over the installed modules.

    Raises:
        CatalogAccessDenied: If ``permission_gate`` rejects access.
        ImageLayoutError: If ``home`` does not hold a recognisable image.
    """

    return installed_finder(Path(home), permission_gate=permission_gate, settings=settings)


def concat(first: ModuleFinder, second: ModuleFinder, *rest: ModuleFinder) -> ModuleFinder:
    """Return a finder searching the given finders in order.

    Args:
        first: Finder consulted first.
        second: Finder consulted when ``first`` has no match.
        *rest: Further fallbacks, folded left.

    Returns:
        ModuleFinder: Composed finder.
    """

    combined: ModuleFinder = ConcatFinder(first, second)
    for finder in rest:
        combined = ConcatFinder(combined, finder)
    return combined


def empty() -> ModuleFinder:
    """Return a finder that contains no modules."""

    return EmptyFinder()
