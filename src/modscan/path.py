# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Module path finder over an ordered sequence of storage entries."""

from __future__ import annotations

import logging
import os
import zipfile
from collections.abc import Iterable
from pathlib import Path

from .automatic import AutomaticModuleSynthesizer
from .config import DEFAULT_SETTINGS, FinderSettings
from .content import scan_packages
from .decoder import DescriptorDecoder, JsonDescriptorDecoder
from .errors import DuplicateModuleError, ModuleFindError
from .finder import ScanningModuleFinder, check_name
from .locator import ARCHIVE_READ_ERRORS, UnitKind, classify, iter_units
from .reference import ModuleReference, archive_reference, exploded_reference

LOGGER = logging.getLogger(__name__)


class ModulePathFinder(ScanningModuleFinder):
    """Locate modules on a module path.

    Each entry is a packaged module, an exploded module, or a directory whose
    immediate children are modules. Entries are scanned lazily, in order, the
    first time a query needs them. When two entries hold a module of the same
    name the earlier entry wins; two modules of the same name inside one
    directory is an error.
    """

    def __init__(
        self,
        entries: Iterable[str | os.PathLike[str]],
        *,
        settings: FinderSettings | None = None,
        decoder: DescriptorDecoder | None = None,
        synthesizer: AutomaticModuleSynthesizer | None = None,
    ) -> None:
        """Create a finder over ``entries`` without touching the filesystem.

        Args:
            entries: Ordered storage entries; missing paths and duplicates are allowed.
            settings: Layout settings; defaults to :data:`DEFAULT_SETTINGS`.
            decoder: Decoder for embedded descriptors.
            synthesizer: Synthesizer for archives without a descriptor.
        """

        super().__init__()
        self._settings = settings or DEFAULT_SETTINGS
        self._entries = tuple(Path(entry) for entry in entries)
        self._decoder = decoder or JsonDescriptorDecoder(settings=self._settings)
        self._synthesizer = synthesizer or AutomaticModuleSynthesizer(settings=self._settings)
        self._cached: dict[str, ModuleReference] = {}
        self._next_entry = 0
        self._all: frozenset[ModuleReference] | None = None

    @property
    def entries(self) -> tuple[Path, ...]:
        """Return the configured storage entries in search order."""

        return self._entries

    def __repr__(self) -> str:
        return f"{type(self).__name__}({[str(entry) for entry in self._entries]!r})"

    def find(self, name: str) -> ModuleReference | None:
        check_name(name)
        return self._guarded(lambda: self._find(name))

    def find_all(self) -> frozenset[ModuleReference]:
        return self._guarded(self._find_all)

    def _find(self, name: str) -> ModuleReference | None:
        while name not in self._cached and self._has_more_entries():
            self._scan_next_entry()
        return self._cached.get(name)

    def _find_all(self) -> frozenset[ModuleReference]:
        if self._all is None:
            while self._has_more_entries():
                self._scan_next_entry()
            self._all = frozenset(self._cached.values())
            self._mark_scanned()
        return self._all

    def _has_more_entries(self) -> bool:
        return self._next_entry < len(self._entries)

    def _scan_next_entry(self) -> None:
        entry = self._entries[self._next_entry]
        for name, reference in self._scan_entry(entry).items():
            if name in self._cached:
                LOGGER.debug("module %s in %s shadowed by %s", name, entry, self._cached[name].location)
                continue
            self._cached[name] = reference
        self._next_entry += 1

    def _scan_entry(self, entry: Path) -> dict[str, ModuleReference]:
        kind = classify(entry, self._settings)
        LOGGER.debug("scanning module path entry %s (%s)", entry, kind.value)
        if kind is UnitKind.MISSING:
            return {}
        if kind is UnitKind.PACKAGED:
            reference = self._read_packaged(entry)
            return {reference.name: reference}
        if kind is UnitKind.EXPLODED:
            reference = self._read_exploded(entry)
            return {reference.name: reference}
        if kind is UnitKind.DIRECTORY:
            return self._scan_directory(entry)
        raise ModuleFindError(f"{entry}: not a module archive or directory")

    def _scan_directory(self, directory: Path) -> dict[str, ModuleReference]:
        found: dict[str, ModuleReference] = {}
        origins: dict[str, Path] = {}
        for unit in iter_units(directory, self._settings):
            if unit.kind is UnitKind.PACKAGED:
                reference = self._read_packaged(unit.path)
            else:
                reference = self._read_exploded(unit.path)
            if reference.name in found:
                raise DuplicateModuleError(reference.name, origins[reference.name], unit.path)
            found[reference.name] = reference
            origins[reference.name] = unit.path
        return found

    def _read_packaged(self, path: Path) -> ModuleReference:
        descriptor_name = self._settings.descriptor_name
        try:
            with zipfile.ZipFile(path) as archive:
                names = archive.namelist()
                if descriptor_name in names:
                    descriptor = self._decoder.decode(
                        archive.read(descriptor_name),
                        source=f"{path}!/{descriptor_name}",
                        package_finder=lambda: scan_packages(names, self._settings, source=str(path)),
                    )
                else:
                    descriptor = self._synthesizer.synthesize(archive, file_name=path.name, source=str(path))
        except ModuleFindError:
            raise
        except ARCHIVE_READ_ERRORS as exc:
            raise ModuleFindError(f"{path}: unable to read module archive") from exc
        return archive_reference(descriptor, path)

    def _read_exploded(self, directory: Path) -> ModuleReference:
        marker = directory / self._settings.descriptor_name
        try:
            data = marker.read_bytes()
        except OSError as exc:
            raise ModuleFindError(f"{marker}: unable to read module descriptor") from exc

        def list_packages() -> frozenset[str]:
            entries = (path.relative_to(directory).as_posix() for path in directory.rglob("*") if path.is_file())
            return scan_packages(entries, self._settings, source=str(directory))

        descriptor = self._decoder.decode(data, source=str(marker), package_finder=list_packages)
        return exploded_reference(descriptor, directory)


__all__ = ("ModulePathFinder",)
