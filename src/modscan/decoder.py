# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Decode embedded ``module-info.json`` descriptors."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol, cast, runtime_checkable

from jsonschema.exceptions import ValidationError as JsonSchemaValidationError

from .config import DEFAULT_SETTINGS, FinderSettings
from .descriptor import ModuleDescriptor, Requires, RequiresModifier, build_provides
from .errors import InvalidDescriptorError
from .schema import descriptor_validator
from .types import JSONValue
from .version import parse_version

PackageFinder = Callable[[], Iterable[str]]


@runtime_checkable
class DescriptorDecoder(Protocol):
    """Protocol implemented by embedded descriptor decoders."""

    def decode(
        self,
        data: bytes,
        *,
        source: str,
        package_finder: PackageFinder | None = None,
    ) -> ModuleDescriptor:
        """Decode ``data`` into a descriptor.

        Args:
            data: Raw descriptor bytes.
            source: Human-readable origin used in error messages.
            package_finder: Optional callable listing the module's namespaces,
                consulted when the descriptor does not declare its packages.

        Returns:
            ModuleDescriptor: Decoded descriptor.

        Raises:
            InvalidDescriptorError: If ``data`` is not a valid descriptor.
        """
        ...


@dataclass(slots=True)
class JsonDescriptorDecoder:
    """Decode JSON descriptors validated against the bundled schema."""

    settings: FinderSettings = field(default_factory=lambda: DEFAULT_SETTINGS)

    def decode(
        self,
        data: bytes,
        *,
        source: str,
        package_finder: PackageFinder | None = None,
    ) -> ModuleDescriptor:
        try:
            document = cast(JSONValue, json.loads(data.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise InvalidDescriptorError(f"{source}: failed to parse module descriptor") from exc
        try:
            descriptor_validator().validate(document)
        except JsonSchemaValidationError as exc:
            location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
            raise InvalidDescriptorError(f"{source}: {location}: {exc.message}") from exc
        mapping = cast(Mapping[str, JSONValue], document)
        return self._build(mapping, source=source, package_finder=package_finder)

    def _build(
        self,
        mapping: Mapping[str, JSONValue],
        *,
        source: str,
        package_finder: PackageFinder | None,
    ) -> ModuleDescriptor:
        name = cast(str, mapping["name"])
        raw_version = cast(str | None, mapping.get("version"))
        exports = frozenset(cast(Sequence[str], mapping.get("exports", ())))

        declared_packages = mapping.get("packages")
        if declared_packages is not None:
            packages = frozenset(cast(Sequence[str], declared_packages))
        elif package_finder is not None:
            packages = frozenset(package_finder())
        else:
            packages = frozenset()
        missing = sorted(exports - packages) if declared_packages is not None else []
        if missing:
            raise InvalidDescriptorError(f"{source}: exported package {missing[0]} is not in the module's packages")

        provides_raw = cast(Mapping[str, Sequence[str]], mapping.get("provides", {}))
        return ModuleDescriptor(
            name=name,
            version=parse_version(raw_version),
            raw_version=raw_version,
            requires=self._requires(name, cast(Sequence[JSONValue], mapping.get("requires", ())), source=source),
            exports=exports,
            packages=packages,
            provides=build_provides(provides_raw),
            main_class=cast(str | None, mapping.get("mainClass")),
            is_automatic=False,
        )

    def _requires(self, name: str, entries: Sequence[JSONValue], *, source: str) -> frozenset[Requires]:
        clauses: dict[str, Requires] = {}
        for entry in entries:
            if isinstance(entry, str):
                clause = Requires(name=entry)
            else:
                item = cast(Mapping[str, JSONValue], entry)
                modifiers = cast(Sequence[str], item.get("modifiers", ()))
                clause = Requires(
                    name=cast(str, item["name"]),
                    modifiers=frozenset(RequiresModifier(value) for value in modifiers),
                )
            if clause.name == name:
                raise InvalidDescriptorError(f"{source}: module {name} cannot require itself")
            if clause.name in clauses:
                raise InvalidDescriptorError(f"{source}: duplicate requires clause for {clause.name}")
            clauses[clause.name] = clause
        base = self.settings.base_module
        if name != base and base not in clauses:
            clauses[base] = Requires(name=base, modifiers=frozenset({RequiresModifier.MANDATED}))
        return frozenset(clauses.values())


__all__ = ("DescriptorDecoder", "JsonDescriptorDecoder", "PackageFinder")
