# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""JSON schema describing ``module-info.json`` documents."""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from typing import Final

from jsonschema import Draft202012Validator

from .types import JSONValue

DESCRIPTOR_SCHEMA_VERSION: Final[str] = "1.0.0"

_QUALIFIED_NAME: Final[dict[str, JSONValue]] = {
    "type": "string",
    "pattern": r"^[A-Za-z_$][A-Za-z0-9_$]*(\.[A-Za-z_$][A-Za-z0-9_$]*)*$",
}

DESCRIPTOR_SCHEMA: Final[Mapping[str, JSONValue]] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://modscan.invalid/schema/module-info.schema.json",
    "title": "Module descriptor",
    "type": "object",
    "required": ["name"],
    "additionalProperties": False,
    "properties": {
        "schemaVersion": {"type": "string"},
        "name": _QUALIFIED_NAME,
        "version": {"type": "string", "minLength": 1},
        "requires": {
            "type": "array",
            "items": {
                "oneOf": [
                    _QUALIFIED_NAME,
                    {
                        "type": "object",
                        "required": ["name"],
                        "additionalProperties": False,
                        "properties": {
                            "name": _QUALIFIED_NAME,
                            "modifiers": {
                                "type": "array",
                                "uniqueItems": True,
                                "items": {"enum": ["transitive", "static", "synthetic", "mandated"]},
                            },
                        },
                    },
                ],
            },
        },
        "exports": {"type": "array", "uniqueItems": True, "items": _QUALIFIED_NAME},
        "packages": {"type": "array", "uniqueItems": True, "items": _QUALIFIED_NAME},
        "provides": {
            "type": "object",
            "propertyNames": _QUALIFIED_NAME,
            "additionalProperties": {"type": "array", "minItems": 1, "items": _QUALIFIED_NAME},
        },
        "mainClass": _QUALIFIED_NAME,
    },
}


@lru_cache(maxsize=1)
def descriptor_validator() -> Draft202012Validator:
    """Return the cached validator for descriptor documents."""

    Draft202012Validator.check_schema(DESCRIPTOR_SCHEMA)
    return Draft202012Validator(DESCRIPTOR_SCHEMA)


__all__ = ("DESCRIPTOR_SCHEMA", "DESCRIPTOR_SCHEMA_VERSION", "descriptor_validator")
