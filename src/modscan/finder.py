# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Abstractions for catalogs that locate modules by name."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum
from typing import TypeVar

from .errors import ModuleFindError
from .reference import ModuleReference

ResultT = TypeVar("ResultT")


class ScanState(Enum):
    """Lifecycle of a catalog's memoized scan."""

    UNSCANNED = "unscanned"
    SCANNED = "scanned"
    FAILED = "failed"


class ModuleFinder(ABC):
    """Queryable catalog of module references.

    Implementations memoize what they discover: once a name has been found or
    confirmed absent, later queries for it answer identically for the life of
    the instance. Instances are not safe for concurrent first use from several
    threads; callers must serialise access or use distinct instances.
    """

    @abstractmethod
    def find(self, name: str) -> ModuleReference | None:
        """Return the reference for module ``name`` or ``None`` when absent.

        Args:
            name: Module name to locate.

        Returns:
            ModuleReference | None: Reference for ``name`` when the catalog holds it.

        Raises:
            TypeError: If ``name`` is not a string.
            ModuleFindError: If scanning a module source fails.
        """

    @abstractmethod
    def find_all(self) -> frozenset[ModuleReference]:
        """Return every module reference in the catalog.

        Returns:
            frozenset[ModuleReference]: One reference per module name.

        Raises:
            ModuleFindError: If scanning a module source fails.
        """

    def __contains__(self, name: object) -> bool:
        """Return whether a module named ``name`` can be found."""

        return isinstance(name, str) and self.find(name) is not None


def check_name(name: object) -> str:
    """Return ``name`` when it is a string, raising ``TypeError`` otherwise."""

    if not isinstance(name, str):
        raise TypeError(f"module name must be a string, not {type(name).__name__}")
    return name


class ScanningModuleFinder(ModuleFinder):
    """Base for finders that scan storage lazily and memoize the result.

    Subclasses run their I/O through :meth:`_guarded`. A :class:`ModuleFindError`
    (or an ``OSError`` escaping a scan) moves the finder into
    :attr:`ScanState.FAILED`; every later query then raises a fresh
    :class:`ModuleFindError` chained to the original failure.
    """

    def __init__(self) -> None:
        self._state = ScanState.UNSCANNED
        self._failure: ModuleFindError | None = None

    @property
    def state(self) -> ScanState:
        """Return the current scan state."""

        return self._state

    def _guarded(self, operation: Callable[[], ResultT]) -> ResultT:
        if self._state is ScanState.FAILED:
            raise ModuleFindError(f"{self!r} is unusable after an earlier failure: {self._failure}") from self._failure
        try:
            return operation()
        except ModuleFindError as exc:
            self._fail(exc)
            raise
        except OSError as exc:
            error = ModuleFindError(str(exc))
            self._fail(error)
            raise error from exc

    def _fail(self, error: ModuleFindError) -> None:
        self._state = ScanState.FAILED
        self._failure = error

    def _mark_scanned(self) -> None:
        self._state = ScanState.SCANNED


__all__ = (
    "ModuleFinder",
    "ScanState",
    "ScanningModuleFinder",
    "check_name",
)
