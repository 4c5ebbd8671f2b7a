# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Classify storage entries into module units."""

from __future__ import annotations

import zipfile
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final

from .config import DEFAULT_SETTINGS, FinderSettings
from .errors import ModuleFindError

ZIP_SIGNATURES: Final[tuple[bytes, ...]] = (b"PK\x03\x04", b"PK\x05\x06")
# zipfile raises NotImplementedError for unsupported compression and
# RuntimeError for encrypted members.
ARCHIVE_READ_ERRORS: Final[tuple[type[Exception], ...]] = (
    OSError,
    zipfile.BadZipFile,
    NotImplementedError,
    RuntimeError,
)


class UnitKind(str, Enum):
    """Enumerate the physical forms a storage entry can take."""

    MISSING = "missing"
    PACKAGED = "packaged"
    EXPLODED = "exploded"
    DIRECTORY = "directory"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class LocatedUnit:
    """A single module unit found on disk."""

    path: Path
    kind: UnitKind


def has_zip_signature(path: Path) -> bool:
    """Return whether ``path`` begins with a zip local-header or end-of-directory signature.

    Raises:
        ModuleFindError: If the file cannot be read.
    """

    try:
        with path.open("rb") as handle:
            header = handle.read(4)
    except OSError as exc:
        raise ModuleFindError(f"{path}: unable to read") from exc
    return header in ZIP_SIGNATURES


def classify(path: Path, settings: FinderSettings = DEFAULT_SETTINGS) -> UnitKind:
    """Return the :class:`UnitKind` of ``path``.

    Args:
        path: Storage entry to inspect.
        settings: Settings naming the descriptor marker and archive suffixes.

    Returns:
        UnitKind: ``MISSING`` for absent paths, ``PACKAGED`` for recognised
        archives, ``EXPLODED`` for directories holding a descriptor marker,
        ``DIRECTORY`` for other directories and ``UNKNOWN`` otherwise.

    Raises:
        ModuleFindError: If the entry exists but cannot be inspected, or carries
            an archive suffix without the archive signature.
    """

    try:
        if not path.exists():
            return UnitKind.MISSING
        if path.is_dir():
            if (path / settings.descriptor_name).is_file():
                return UnitKind.EXPLODED
            return UnitKind.DIRECTORY
        is_file = path.is_file()
    except OSError as exc:
        raise ModuleFindError(f"{path}: unable to inspect") from exc
    if not is_file or settings.archive_suffix(path.name) is None:
        return UnitKind.UNKNOWN
    if not has_zip_signature(path):
        raise ModuleFindError(f"{path}: not a valid module archive")
    return UnitKind.PACKAGED


def iter_units(directory: Path, settings: FinderSettings = DEFAULT_SETTINGS) -> Iterator[LocatedUnit]:
    """Yield the module units held directly inside ``directory``.

    Children are visited in name order. Hidden entries, unrecognised files and
    subdirectories without a descriptor marker are skipped; nesting is not
    followed.

    Args:
        directory: Directory of module units.
        settings: Settings forwarded to :func:`classify`.

    Yields:
        LocatedUnit: Packaged or exploded units in ``directory``.

    Raises:
        ModuleFindError: If ``directory`` cannot be listed.
    """

    try:
        children = sorted(directory.iterdir(), key=lambda child: child.name)
    except OSError as exc:
        raise ModuleFindError(f"{directory}: unable to list directory") from exc
    for child in children:
        if child.name.startswith("."):
            continue
        kind = classify(child, settings)
        if kind in {UnitKind.PACKAGED, UnitKind.EXPLODED}:
            yield LocatedUnit(path=child, kind=kind)


__all__ = (
    "ARCHIVE_READ_ERRORS",
    "LocatedUnit",
    "UnitKind",
    "ZIP_SIGNATURES",
    "classify",
    "iter_units",
    "has_zip_signature",
)
