# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Module descriptor models shared by decoders, synthesizers and finders."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from types import MappingProxyType
from typing import Final

from .errors import InvalidDescriptorError
from .version import ModuleVersion

_IDENTIFIER_RE: Final[re.Pattern[str]] = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")


class RequiresModifier(str, Enum):
    """Enumerate modifiers attached to a ``requires`` clause."""

    TRANSITIVE = "transitive"
    STATIC = "static"
    SYNTHETIC = "synthetic"
    MANDATED = "mandated"


@dataclass(frozen=True, slots=True, order=True)
class Requires:
    """Dependency on another module by name."""

    name: str
    modifiers: frozenset[RequiresModifier] = field(default_factory=frozenset, compare=False)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation of the clause."""

        return {"name": self.name, "modifiers": sorted(modifier.value for modifier in self.modifiers)}


@dataclass(frozen=True, slots=True)
class Provides:
    """Service type paired with the provider classes that implement it."""

    service: str
    providers: tuple[str, ...]


@total_ordering
@dataclass(frozen=True, slots=True)
class ModuleDescriptor:
    """Immutable description of a named module.

    Attributes:
        name: Module name, unique within a catalog.
        version: Parsed version, ``None`` when absent or unparsable.
        raw_version: Version text as declared, kept even when unparsable.
        requires: Dependencies on other modules.
        exports: Namespaces made available to other modules.
        packages: Every namespace contained in the module.
        provides: Service implementations in declaration order.
        main_class: Optional entry point class.
        is_automatic: ``True`` when synthesized from an archive without a descriptor.
    """

    name: str
    version: ModuleVersion | None = None
    raw_version: str | None = None
    requires: frozenset[Requires] = frozenset()
    exports: frozenset[str] = frozenset()
    packages: frozenset[str] = frozenset()
    provides: tuple[Provides, ...] = ()
    main_class: str | None = None
    is_automatic: bool = False

    def __post_init__(self) -> None:
        """Validate the name and widen ``packages`` to cover ``exports``."""

        if not is_qualified_name(self.name, strict=False):
            raise InvalidDescriptorError(f"'{self.name}' is not a valid module name")
        if self.raw_version is None and self.version is not None:
            object.__setattr__(self, "raw_version", str(self.version))
        if not self.exports <= self.packages:
            object.__setattr__(self, "packages", self.packages | self.exports)

    @property
    def provides_map(self) -> Mapping[str, tuple[str, ...]]:
        """Return provided services keyed by service type."""

        return MappingProxyType({entry.service: entry.providers for entry in self.provides})

    @property
    def display_name(self) -> str:
        """Return ``name@version`` or the bare name when unversioned."""

        if self.raw_version:
            return f"{self.name}@{self.raw_version}"
        return self.name

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ModuleDescriptor):
            return NotImplemented
        if self.name != other.name:
            return self.name < other.name
        if self.version is None or other.version is None:
            return self.version is None and other.version is not None
        return self.version < other.version

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation of the descriptor.

        Returns:
            dict[str, object]: Plain mapping with sorted collections.
        """

        return {
            "name": self.name,
            "version": self.raw_version,
            "automatic": self.is_automatic,
            "requires": [clause.to_dict() for clause in sorted(self.requires)],
            "exports": sorted(self.exports),
            "packages": sorted(self.packages),
            "provides": {entry.service: list(entry.providers) for entry in self.provides},
            "mainClass": self.main_class,
        }


def is_qualified_name(value: str, *, strict: bool = True) -> bool:
    """Return whether ``value`` is a ``.``-separated qualified name.

    Args:
        value: Candidate module, namespace or class name.
        strict: When ``True`` every segment must be an identifier; otherwise
            segments only need to be non-empty.

    Returns:
        bool: ``True`` when ``value`` is acceptable.
    """

    if not value:
        return False
    for segment in value.split("."):
        if not segment:
            return False
        if strict and _IDENTIFIER_RE.fullmatch(segment) is None:
            return False
    return True


def require_qualified_name(value: str, *, kind: str, context: str) -> str:
    """Return ``value`` when it is a strict qualified name, raising otherwise.

    Args:
        value: Candidate name.
        kind: Human-readable kind used in error messages (``module``, ``package``).
        context: Source description used in error messages.

    Returns:
        str: ``value`` unchanged.

    Raises:
        InvalidDescriptorError: If ``value`` is not a legal qualified name.
    """

    if not is_qualified_name(value):
        raise InvalidDescriptorError(f"{context}: '{value}' is not a legal {kind} name")
    return value


def build_provides(entries: Mapping[str, Sequence[str]] | Iterable[tuple[str, Sequence[str]]]) -> tuple[Provides, ...]:
    """Return ``Provides`` clauses from a mapping or ordered pairs.

    Args:
        entries: Service types mapped to ordered provider class names.

    Returns:
        tuple[Provides, ...]: Clauses in input order, empty services dropped.
    """

    pairs = entries.items() if isinstance(entries, Mapping) else entries
    return tuple(Provides(service=service, providers=tuple(providers)) for service, providers in pairs if providers)


__all__ = (
    "ModuleDescriptor",
    "Provides",
    "Requires",
    "RequiresModifier",
    "build_provides",
    "is_qualified_name",
    "require_qualified_name",
)
