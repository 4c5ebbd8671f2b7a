# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Custom exceptions raised by module discovery operations."""

from __future__ import annotations

from pathlib import Path


class ModscanError(RuntimeError):
    """Base class for errors raised by :mod:`modscan`."""


class ModuleFindError(ModscanError):
    """Raised when scanning a module source fails.

    The underlying cause (an ``OSError``, a decode error, a duplicate module)
    is chained through ``__cause__`` when one exists.
    """


class InvalidDescriptorError(ModuleFindError):
    """Raised when a module descriptor is malformed or violates naming rules."""


class DuplicateModuleError(ModuleFindError):
    """Raised when one directory of modules holds two units with the same name."""

    def __init__(self, name: str, first: Path, second: Path) -> None:
        """Create the error naming both conflicting units.

        Args:
            name: Module name claimed by both units.
            first: Unit discovered first in directory order.
            second: Unit that collided with ``first``.
        """

        super().__init__(f"Two versions of module {name} found in {first.parent} ({first.name} and {second.name})")
        self.name = name
        self.first = first
        self.second = second


class CatalogAccessDenied(PermissionError):
    """Raised when the permission gate rejects access to an installed image."""


class ImageLayoutError(ModscanError):
    """Raised when an installation root does not expose a recognisable image layout."""


__all__ = (
    "CatalogAccessDenied",
    "DuplicateModuleError",
    "ImageLayoutError",
    "InvalidDescriptorError",
    "ModscanError",
    "ModuleFindError",
)
