# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Synthesize descriptors for archives that do not carry one.

An archive without an embedded descriptor becomes an *automatic* module:

* its name and version come from the file name (``foo-1.2.3.jar`` is module
  ``foo`` at version ``1.2.3``) unless the manifest declares an
  ``Automatic-Module-Name``;
* every namespace holding a compiled class is exported;
* ``META-INF/services`` files become ``provides`` clauses;
* the manifest ``Main-Class`` becomes the entry point.
"""

from __future__ import annotations

import logging
import re
import zipfile
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Final

from .config import DEFAULT_SETTINGS, FinderSettings
from .content import parse_manifest, parse_service_configuration, scan_packages
from .descriptor import (
    ModuleDescriptor,
    Provides,
    Requires,
    RequiresModifier,
    build_provides,
    is_qualified_name,
    require_qualified_name,
)
from .errors import InvalidDescriptorError, ModuleFindError
from .locator import ARCHIVE_READ_ERRORS
from .version import parse_version

LOGGER = logging.getLogger(__name__)

VERSION_MARKER_RE: Final[re.Pattern[str]] = re.compile(r"-(\d+(\.|$))")
_NON_ALPHANUMERIC_RE: Final[re.Pattern[str]] = re.compile(r"[^A-Za-z0-9]")
_REPEATED_DOTS_RE: Final[re.Pattern[str]] = re.compile(r"\.{2,}")
MAIN_CLASS_ATTRIBUTE: Final[str] = "Main-Class"
AUTOMATIC_NAME_ATTRIBUTE: Final[str] = "Automatic-Module-Name"


@dataclass(frozen=True, slots=True)
class DerivedIdentity:
    """Module name and version derived from an archive file name."""

    name: str
    version_text: str | None


def derive_identity(file_name: str, settings: FinderSettings = DEFAULT_SETTINGS) -> DerivedIdentity:
    """Derive an automatic module name and version from ``file_name``.

    The archive suffix is removed, then the first ``-<digits>`` run followed by
    ``.`` or the end of the name splits the base name into a name part and a
    version. Every non-alphanumeric character of the name part becomes ``.``,
    repeated dots collapse and leading or trailing dots are stripped. A
    version that does not parse is dropped.

    Args:
        file_name: Archive file name, for example ``foo-1.2.3-SNAPSHOT.jar``.
        settings: Settings listing recognised archive suffixes.

    Returns:
        DerivedIdentity: Derived name and optional version text.

    Raises:
        ModuleFindError: If no module name can be derived.
    """

    base, version_text = split_file_name(file_name, settings)
    name = _REPEATED_DOTS_RE.sub(".", _NON_ALPHANUMERIC_RE.sub(".", base)).strip(".")
    if not name:
        raise ModuleFindError(f"{file_name}: unable to derive module name")
    return DerivedIdentity(name=name, version_text=version_text)


def split_file_name(file_name: str, settings: FinderSettings = DEFAULT_SETTINGS) -> tuple[str, str | None]:
    """Split ``file_name`` into its raw name part and parsable version text, if any."""

    suffix = settings.archive_suffix(file_name)
    base = file_name[: -len(suffix)] if suffix else file_name
    match = VERSION_MARKER_RE.search(base)
    if match is None:
        return base, None
    candidate = base[match.start() + 1 :]
    version_text = candidate if parse_version(candidate) is not None else None
    return base[: match.start()], version_text


@dataclass(slots=True)
class AutomaticModuleSynthesizer:
    """Build :class:`ModuleDescriptor` instances for descriptor-less archives."""

    settings: FinderSettings = field(default_factory=lambda: DEFAULT_SETTINGS)

    def synthesize(self, archive: zipfile.ZipFile, *, file_name: str, source: str) -> ModuleDescriptor:
        """Return the automatic descriptor for an open archive.

        Args:
            archive: Open archive to scan.
            file_name: Archive file name used to derive the module identity.
            source: Human-readable origin used in error messages.

        Returns:
            ModuleDescriptor: Synthesized descriptor with ``is_automatic`` set.

        Raises:
            ModuleFindError: If the archive holds a class in the root namespace,
                a malformed service configuration, or cannot be read.
        """

        entries = [info.filename for info in archive.infolist() if not info.is_dir()]
        manifest = self._read_manifest(archive, entries, source=source)

        declared_name = manifest.get(AUTOMATIC_NAME_ATTRIBUTE.lower())
        if declared_name:
            name = require_qualified_name(declared_name, kind="module", context=f"{source}: {AUTOMATIC_NAME_ATTRIBUTE}")
            _, version_text = split_file_name(file_name, self.settings)
        else:
            identity = derive_identity(file_name, self.settings)
            name, version_text = identity.name, identity.version_text

        packages = self._packages(entries, source=source)
        provides = self._provides(archive, entries, source=source)

        main_class = manifest.get(MAIN_CLASS_ATTRIBUTE.lower()) or None
        if main_class is not None:
            main_class = require_qualified_name(main_class, kind="class", context=f"{source}: {MAIN_CLASS_ATTRIBUTE}")

        requires: frozenset[Requires] = frozenset()
        if name != self.settings.base_module:
            requires = frozenset(
                {Requires(name=self.settings.base_module, modifiers=frozenset({RequiresModifier.MANDATED}))},
            )

        LOGGER.debug("synthesized automatic module %s from %s", name, source)
        return ModuleDescriptor(
            name=name,
            version=parse_version(version_text),
            raw_version=version_text,
            requires=requires,
            exports=packages,
            packages=packages,
            provides=provides,
            main_class=main_class,
            is_automatic=True,
        )

    def _packages(self, entries: Sequence[str], *, source: str) -> frozenset[str]:
        packages = scan_packages(entries, self.settings, source=source)
        for namespace in sorted(packages):
            if not is_qualified_name(namespace):
                raise InvalidDescriptorError(f"{source}: {namespace} is not a legal package name")
        return packages

    def _provides(self, archive: zipfile.ZipFile, entries: Sequence[str], *, source: str) -> tuple[Provides, ...]:
        prefix = self.settings.services_prefix
        services: list[tuple[str, tuple[str, ...]]] = []
        for entry in sorted(entries):
            if not entry.startswith(prefix):
                continue
            service = entry[len(prefix) :]
            if not service or "/" in service:
                continue
            require_qualified_name(service, kind="service type", context=f"{source}: {entry}")
            text = self._read_text(archive, entry, source=source)
            providers = parse_service_configuration(text)
            for provider in providers:
                require_qualified_name(provider, kind="provider class", context=f"{source}: {entry}")
            services.append((service, providers))
        return build_provides(services)

    def _read_manifest(self, archive: zipfile.ZipFile, entries: Sequence[str], *, source: str) -> dict[str, str]:
        if self.settings.manifest_name not in entries:
            return {}
        return parse_manifest(self._read_text(archive, self.settings.manifest_name, source=source))

    @staticmethod
    def _read_text(archive: zipfile.ZipFile, entry: str, *, source: str) -> str:
        try:
            return archive.read(entry).decode("utf-8")
        except (*ARCHIVE_READ_ERRORS, UnicodeDecodeError) as exc:
            raise ModuleFindError(f"{source}: unable to read {entry}") from exc


__all__ = (
    "AUTOMATIC_NAME_ATTRIBUTE",
    "AutomaticModuleSynthesizer",
    "DerivedIdentity",
    "MAIN_CLASS_ATTRIBUTE",
    "VERSION_MARKER_RE",
    "derive_identity",
    "split_file_name",
)
