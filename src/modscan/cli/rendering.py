# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Rendering helpers for module catalog commands."""

from __future__ import annotations

import json
from collections.abc import Iterable

from rich.table import Table

from ..descriptor import ModuleDescriptor
from ..reference import ModuleReference


def sorted_references(references: Iterable[ModuleReference]) -> list[ModuleReference]:
    """Return ``references`` ordered by module name."""

    return sorted(references, key=lambda reference: reference.name)


def build_modules_table(references: Iterable[ModuleReference], *, title: str) -> Table:
    """Return a table listing ``references``.

    Args:
        references: Module references to render.
        title: Table title.

    Returns:
        Table: Rich table with one row per module.
    """

    table = Table(title=title, show_lines=False)
    table.add_column("Module", style="bold cyan", no_wrap=True)
    table.add_column("Version")
    table.add_column("Kind")
    table.add_column("Location", overflow="fold")
    for reference in sorted_references(references):
        descriptor = reference.descriptor
        table.add_row(
            descriptor.name,
            descriptor.raw_version or "-",
            "automatic" if descriptor.is_automatic else "explicit",
            reference.location or "-",
        )
    return table


def build_descriptor_table(reference: ModuleReference) -> Table:
    """Return a two-column table describing one module."""

    descriptor = reference.descriptor
    table = Table(title=descriptor.display_name, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")
    table.add_row("Location", reference.location or "-")
    table.add_row("Automatic", "yes" if descriptor.is_automatic else "no")
    table.add_row("Requires", _join(_requires_labels(descriptor)))
    table.add_row("Exports", _join(sorted(descriptor.exports)))
    table.add_row("Packages", _join(sorted(descriptor.packages)))
    for entry in descriptor.provides:
        table.add_row(f"Provides {entry.service}", _join(entry.providers))
    table.add_row("Main class", descriptor.main_class or "-")
    return table


def references_to_json(references: Iterable[ModuleReference]) -> str:
    """Return a JSON document listing ``references`` by module name."""

    payload = [reference_to_dict(reference) for reference in sorted_references(references)]
    return json.dumps(payload, indent=2, sort_keys=True)


def reference_to_dict(reference: ModuleReference) -> dict[str, object]:
    """Return a JSON-friendly mapping for ``reference``."""

    payload = reference.descriptor.to_dict()
    payload["location"] = reference.location
    return payload


def _requires_labels(descriptor: ModuleDescriptor) -> list[str]:
    labels: list[str] = []
    for clause in sorted(descriptor.requires):
        modifiers = " ".join(sorted(modifier.value for modifier in clause.modifiers))
        labels.append(f"{clause.name} ({modifiers})" if modifiers else clause.name)
    return labels


def _join(values: Iterable[str]) -> str:
    joined = ", ".join(values)
    return joined or "-"


__all__ = [
    "build_descriptor_table",
    "build_modules_table",
    "reference_to_dict",
    "references_to_json",
    "sorted_references",
]
