# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Finders composed from other finders."""

from __future__ import annotations

from .errors import ModuleFindError
from .finder import ModuleFinder, check_name
from .reference import ModuleReference


class ConcatFinder(ModuleFinder):
    """Search ``first`` and fall back to ``second`` when a module is absent.

    Failures raised by either finder propagate; only an absent result falls
    through to ``second``.
    """

    def __init__(self, first: ModuleFinder, second: ModuleFinder) -> None:
        """Create a finder that prefers ``first`` over ``second``.

        Args:
            first: Finder consulted first.
            second: Finder consulted when ``first`` has no match.
        """

        self._first = first
        self._second = second
        self._all: frozenset[ModuleReference] | None = None

    @property
    def first(self) -> ModuleFinder:
        """Return the preferred finder."""

        return self._first

    @property
    def second(self) -> ModuleFinder:
        """Return the fallback finder."""

        return self._second

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._first!r}, {self._second!r})"

    def find(self, name: str) -> ModuleReference | None:
        check_name(name)
        reference = self._first.find(name)
        if reference is None:
            reference = self._second.find(name)
        return reference

    def find_all(self) -> frozenset[ModuleReference]:
        """Return the union of both finders, preferring ``first`` on overlap.

        Names are gathered from both finders and re-resolved through
        :meth:`find` so the result agrees with single-name lookups.
        """

        if self._all is None:
            names = {reference.name for reference in self._first.find_all()}
            names.update(reference.name for reference in self._second.find_all())
            references: set[ModuleReference] = set()
            for name in names:
                reference = self.find(name)
                if reference is None:
                    raise ModuleFindError(f"module {name} listed by find_all() but not found by find()")
                references.add(reference)
            self._all = frozenset(references)
        return self._all


class EmptyFinder(ModuleFinder):
    """Finder that holds no modules and never performs I/O."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def find(self, name: str) -> ModuleReference | None:
        check_name(name)
        return None

    def find_all(self) -> frozenset[ModuleReference]:
        return frozenset()


__all__ = ("ConcatFinder", "EmptyFinder")
