# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Module references and the readers that open module content."""

from __future__ import annotations

import zipfile
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from types import TracebackType
from typing import IO, Final

from .descriptor import ModuleDescriptor

IMAGE_SCHEME: Final[str] = "image"


class ModuleReader(ABC):
    """Scoped access to the resources of one module.

    Readers acquire their underlying file handles on first use and release
    them on :meth:`close`; use them as context managers.
    """

    def __init__(self) -> None:
        self._closed = False

    @abstractmethod
    def list(self) -> tuple[str, ...]:
        """Return the ``/``-separated names of every resource in the module."""

    @abstractmethod
    def _open(self, name: str) -> IO[bytes] | None:
        """Open resource ``name`` or return ``None`` when it does not exist."""

    @abstractmethod
    def _location(self, name: str) -> str:
        """Return a URI for resource ``name``."""

    def _release(self) -> None:
        """Release any handle held by the reader."""

    def find(self, name: str) -> str | None:
        """Return a URI for resource ``name`` or ``None`` when it is absent.

        Args:
            name: ``/``-separated resource name.

        Returns:
            str | None: Resource location, or ``None`` when not present.
        """

        self._ensure_open()
        if name not in self._names():
            return None
        return self._location(name)

    def open(self, name: str) -> IO[bytes] | None:
        """Return a binary stream for resource ``name`` or ``None`` when absent."""

        self._ensure_open()
        if not _is_safe_name(name):
            return None
        return self._open(name)

    def read(self, name: str) -> bytes | None:
        """Return the bytes of resource ``name`` or ``None`` when absent."""

        stream = self.open(name)
        if stream is None:
            return None
        with stream:
            return stream.read()

    def close(self) -> None:
        """Close the reader, releasing any open handles."""

        if not self._closed:
            self._closed = True
            self._release()

    @property
    def closed(self) -> bool:
        """Return whether :meth:`close` has been called."""

        return self._closed

    def __enter__(self) -> ModuleReader:
        self._ensure_open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def _names(self) -> frozenset[str]:
        return frozenset(self.list())

    def _ensure_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed module reader")


class ArchiveModuleReader(ModuleReader):
    """Read resources from a packaged module archive.

    ``prefix`` restricts the reader to one top-level directory, which is how
    modules stored inside a packed runtime image are exposed.
    """

    def __init__(self, archive: Path, *, prefix: str = "", location: str | None = None) -> None:
        super().__init__()
        self._archive = archive
        self._prefix = prefix
        self._base_location = location or archive.resolve().as_uri()
        self._zip: zipfile.ZipFile | None = None

    def _zipfile(self) -> zipfile.ZipFile:
        if self._zip is None:
            self._zip = zipfile.ZipFile(self._archive)
        return self._zip

    def list(self) -> tuple[str, ...]:
        self._ensure_open()
        names: list[str] = []
        for info in self._zipfile().infolist():
            if info.is_dir() or not info.filename.startswith(self._prefix):
                continue
            names.append(info.filename[len(self._prefix) :])
        return tuple(names)

    def _open(self, name: str) -> IO[bytes] | None:
        try:
            return self._zipfile().open(f"{self._prefix}{name}")
        except KeyError:
            return None

    def _location(self, name: str) -> str:
        if self._prefix:
            return f"{self._base_location}/{name}"
        return f"jar:{self._base_location}!/{name}"

    def _release(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None


class ExplodedModuleReader(ModuleReader):
    """Read resources from an exploded module directory."""

    def __init__(self, root: Path) -> None:
        super().__init__()
        self._root = root.resolve()

    def list(self) -> tuple[str, ...]:
        self._ensure_open()
        return tuple(
            sorted(path.relative_to(self._root).as_posix() for path in self._root.rglob("*") if path.is_file()),
        )

    def _resolve(self, name: str) -> Path | None:
        candidate = (self._root / name).resolve()
        if not candidate.is_relative_to(self._root) or not candidate.is_file():
            return None
        return candidate

    def find(self, name: str) -> str | None:
        self._ensure_open()
        if not _is_safe_name(name):
            return None
        candidate = self._resolve(name)
        return candidate.as_uri() if candidate is not None else None

    def _open(self, name: str) -> IO[bytes] | None:
        candidate = self._resolve(name)
        if candidate is None:
            return None
        return candidate.open("rb")

    def _location(self, name: str) -> str:
        return (self._root / name).as_uri()


ReaderFactory = Callable[[], ModuleReader]


@dataclass(frozen=True, slots=True)
class ModuleReference:
    """Handle pairing a module descriptor with the location of its content.

    References compare by descriptor and location; the opener is a capability
    that is only invoked by :meth:`open`.
    """

    descriptor: ModuleDescriptor
    location: str | None
    opener: ReaderFactory = field(compare=False, repr=False)

    @property
    def name(self) -> str:
        """Return the module name."""

        return self.descriptor.name

    def open(self) -> ModuleReader:
        """Return a new reader over the module's content."""

        return self.opener()


def archive_reference(descriptor: ModuleDescriptor, archive: Path) -> ModuleReference:
    """Return a reference to a packaged module."""

    resolved = archive.resolve()
    return ModuleReference(
        descriptor=descriptor,
        location=resolved.as_uri(),
        opener=lambda: ArchiveModuleReader(resolved),
    )


def exploded_reference(descriptor: ModuleDescriptor, root: Path) -> ModuleReference:
    """Return a reference to an exploded module."""

    resolved = root.resolve()
    return ModuleReference(
        descriptor=descriptor,
        location=resolved.as_uri(),
        opener=lambda: ExplodedModuleReader(resolved),
    )


def image_reference(descriptor: ModuleDescriptor, image: Path) -> ModuleReference:
    """Return a reference to a module stored inside a packed runtime image."""

    location = f"{IMAGE_SCHEME}:///{descriptor.name}"
    prefix = f"{descriptor.name}/"
    return ModuleReference(
        descriptor=descriptor,
        location=location,
        opener=lambda: ArchiveModuleReader(image, prefix=prefix, location=location),
    )


def _is_safe_name(name: str) -> bool:
    if not name or name.startswith("/") or "\\" in name:
        return False
    return ".." not in PurePosixPath(name).parts


__all__ = (
    "ArchiveModuleReader",
    "ExplodedModuleReader",
    "IMAGE_SCHEME",
    "ModuleReader",
    "ModuleReference",
    "ReaderFactory",
    "archive_reference",
    "exploded_reference",
    "image_reference",
)
