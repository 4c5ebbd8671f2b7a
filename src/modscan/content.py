# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers that interpret the resource listing of a module."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Final

from .config import FinderSettings
from .errors import ModuleFindError

META_INF_PREFIX: Final[str] = "META-INF/"
MODULE_INFO_CLASS: Final[str] = "module-info.class"
_MANIFEST_CONTINUATION: Final[str] = " "


def iter_class_entries(entries: Iterable[str], settings: FinderSettings) -> Iterator[str]:
    """Yield entries naming compiled classes, skipping metadata.

    Args:
        entries: ``/``-separated resource names.
        settings: Settings providing the class suffix.

    Yields:
        str: Entries that end with the class suffix and live outside ``META-INF``.
    """

    for entry in entries:
        if not entry.endswith(settings.class_suffix) or entry.endswith("/"):
            continue
        if entry.startswith(META_INF_PREFIX) or entry == MODULE_INFO_CLASS:
            continue
        yield entry


def namespace_of(entry: str) -> str:
    """Return the dotted namespace of ``entry`` (``""`` for the root)."""

    head, _, _ = entry.rpartition("/")
    return head.replace("/", ".")


def scan_packages(entries: Iterable[str], settings: FinderSettings, *, source: str) -> frozenset[str]:
    """Return the namespaces holding the classes in ``entries``.

    Args:
        entries: ``/``-separated resource names of one module.
        settings: Settings providing the class suffix.
        source: Human-readable origin used in error messages.

    Returns:
        frozenset[str]: Dotted namespace names.

    Raises:
        ModuleFindError: If a class sits in the root namespace.
    """

    packages: set[str] = set()
    for entry in iter_class_entries(entries, settings):
        namespace = namespace_of(entry)
        if not namespace:
            raise ModuleFindError(f"{source}: {entry} found in top-level directory (unnamed package not allowed)")
        packages.add(namespace)
    return frozenset(packages)


def parse_manifest(text: str) -> dict[str, str]:
    """Return the main-section attributes of a manifest document.

    Continuation lines (starting with a single space) are joined to the
    preceding attribute; parsing stops at the first blank line. Attribute
    names are case-insensitive and are returned lower-cased.

    Args:
        text: Manifest contents.

    Returns:
        dict[str, str]: Lower-cased attribute names mapped to values.
    """

    attributes: dict[str, str] = {}
    current: str | None = None
    for raw_line in text.splitlines():
        if not raw_line.strip():
            break
        if raw_line.startswith(_MANIFEST_CONTINUATION) and current is not None:
            attributes[current] += raw_line[1:]
            continue
        key, separator, value = raw_line.partition(":")
        if not separator:
            continue
        current = key.strip().lower()
        attributes[current] = value.strip()
    return attributes


def parse_service_configuration(text: str) -> tuple[str, ...]:
    """Return provider class names listed in a service configuration file.

    Args:
        text: Contents of a ``META-INF/services`` file.

    Returns:
        tuple[str, ...]: Provider names in file order, comments and blanks removed,
        duplicates dropped after their first occurrence.
    """

    providers: list[str] = []
    for raw_line in text.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if line and line not in providers:
            providers.append(line)
    return tuple(providers)


__all__ = (
    "META_INF_PREFIX",
    "MODULE_INFO_CLASS",
    "iter_class_entries",
    "namespace_of",
    "parse_manifest",
    "parse_service_configuration",
    "scan_packages",
)
