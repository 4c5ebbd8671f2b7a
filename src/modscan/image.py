# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Finders for the modules of an installed runtime image."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Final, Protocol, runtime_checkable

from .config import DEFAULT_SETTINGS, FinderSettings
from .content import scan_packages
from .decoder import DescriptorDecoder, JsonDescriptorDecoder
from .errors import ImageLayoutError, ModuleFindError
from .finder import ModuleFinder, ScanningModuleFinder, check_name
from .locator import ARCHIVE_READ_ERRORS
from .path import ModulePathFinder
from .reference import ModuleReference, image_reference

LOGGER = logging.getLogger(__name__)

PACKED_IMAGE_PATH: Final[tuple[str, ...]] = ("lib", "modules")
EXPLODED_IMAGE_DIR: Final[str] = "modules"


@runtime_checkable
class PermissionGate(Protocol):
    """Check performed before an installation directory is read."""

    def check_read(self, path: Path) -> None:
        """Raise :class:`~modscan.errors.CatalogAccessDenied` when ``path`` may not be read."""
        ...


class AllowAllGate:
    """Permission gate that grants every request."""

    def check_read(self, path: Path) -> None:
        """Accept ``path`` unconditionally."""


class InstalledImageFinder(ScanningModuleFinder):
    """Serve modules from a packed runtime image.

    The image is a zip-format archive whose top-level directories are modules,
    each holding its own descriptor. The index is read once, on the first
    query, and every later query is answered from memory.
    """

    def __init__(
        self,
        image: Path,
        *,
        settings: FinderSettings | None = None,
        decoder: DescriptorDecoder | None = None,
    ) -> None:
        super().__init__()
        self._image = image
        self._settings = settings or DEFAULT_SETTINGS
        self._decoder = decoder or JsonDescriptorDecoder(settings=self._settings)
        self._modules: dict[str, ModuleReference] | None = None
        self._all: frozenset[ModuleReference] | None = None

    @property
    def image(self) -> Path:
        """Return the packed image file backing this finder."""

        return self._image

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._image)!r})"

    def find(self, name: str) -> ModuleReference | None:
        check_name(name)
        return self._guarded(lambda: self._index().get(name))

    def find_all(self) -> frozenset[ModuleReference]:
        return self._guarded(self._find_all)

    def _find_all(self) -> frozenset[ModuleReference]:
        if self._all is None:
            self._all = frozenset(self._index().values())
        return self._all

    def _index(self) -> dict[str, ModuleReference]:
        if self._modules is None:
            self._modules = self._read_index()
            self._mark_scanned()
        return self._modules

    def _read_index(self) -> dict[str, ModuleReference]:
        descriptor_name = self._settings.descriptor_name
        modules: dict[str, ModuleReference] = {}
        try:
            with zipfile.ZipFile(self._image) as archive:
                contents: dict[str, list[str]] = {}
                for info in archive.infolist():
                    head, separator, rest = info.filename.partition("/")
                    if not separator or not head:
                        continue
                    bucket = contents.setdefault(head, [])
                    if rest and not info.is_dir():
                        bucket.append(rest)
                for directory in sorted(contents):
                    entries = contents[directory]
                    if descriptor_name not in entries:
                        raise ModuleFindError(f"{self._image}: module directory {directory} has no {descriptor_name}")
                    descriptor = self._decoder.decode(
                        archive.read(f"{directory}/{descriptor_name}"),
                        source=f"{self._image}!/{directory}/{descriptor_name}",
                        package_finder=lambda entries=entries, directory=directory: scan_packages(
                            entries,
                            self._settings,
                            source=f"{self._image}!/{directory}",
                        ),
                    )
                    if descriptor.name != directory:
                        raise ModuleFindError(
                            f"{self._image}: module {descriptor.name} stored under directory {directory}",
                        )
                    modules[descriptor.name] = image_reference(descriptor, self._image)
        except ModuleFindError:
            raise
        except ARCHIVE_READ_ERRORS as exc:
            raise ModuleFindError(f"{self._image}: unable to read runtime image") from exc
        LOGGER.debug("indexed %d modules from runtime image %s", len(modules), self._image)
        return modules


def installed_finder(
    home: Path,
    *,
    permission_gate: PermissionGate | None = None,
    settings: FinderSettings | None = None,
) -> ModuleFinder:
    """Return a finder over the runtime image installed at ``home``.

    ``home/lib/modules`` as a regular file is served as a packed image;
    otherwise ``home/modules`` as a directory is searched as a module path.

    Args:
        home: Installation root.
        permission_gate: Gate consulted before the installation is inspected.
        settings: Layout settings forwarded to the finder.

    Returns:
        ModuleFinder: Finder over the installed modules.

    Raises:
        CatalogAccessDenied: If the gate rejects reading ``home``.
        ImageLayoutError: If neither layout is present.
    """

    gate = permission_gate or AllowAllGate()
    gate.check_read(home)
    packed = home.joinpath(*PACKED_IMAGE_PATH)
    if packed.is_file():
        LOGGER.debug("using packed runtime image %s", packed)
        return InstalledImageFinder(packed, settings=settings)
    exploded = home / EXPLODED_IMAGE_DIR
    if exploded.is_dir():
        LOGGER.debug("using exploded runtime image %s", exploded)
        return ModulePathFinder([exploded], settings=settings)
    raise ImageLayoutError(f"{home}: unable to detect the run-time image")


__all__ = (
    "AllowAllGate",
    "EXPLODED_IMAGE_DIR",
    "InstalledImageFinder",
    "PACKED_IMAGE_PATH",
    "PermissionGate",
    "installed_finder",
)
