# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders for module discovery."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "modscan"
ENV_PREFIX: Final[str] = "MODSCAN_"
DEFAULT_ARCHIVE_SUFFIXES: Final[tuple[str, ...]] = (".jar", ".zip")


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class FinderSettings(BaseModel):
    """Layout conventions used when locating and describing modules."""

    model_config = ConfigDict(validate_assignment=True)

    descriptor_name: str = "module-info.json"
    archive_suffixes: tuple[str, ...] = DEFAULT_ARCHIVE_SUFFIXES
    class_suffix: str = ".class"
    services_prefix: str = "META-INF/services/"
    manifest_name: str = "META-INF/MANIFEST.MF"
    base_module: str = "java.base"
    home: Path | None = Field(default=None)

    @field_validator("archive_suffixes", mode="before")
    @classmethod
    def _split_suffixes(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        return value

    @field_validator("archive_suffixes")
    @classmethod
    def _check_suffixes(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("at least one archive suffix is required")
        for suffix in value:
            if not suffix.startswith("."):
                raise ValueError(f"archive suffix '{suffix}' must start with '.'")
        return tuple(suffix.lower() for suffix in value)

    @field_validator("services_prefix")
    @classmethod
    def _check_services_prefix(cls, value: str) -> str:
        return value if value.endswith("/") else f"{value}/"

    def archive_suffix(self, name: str) -> str | None:
        """Return the recognised archive suffix of ``name``, if any.

        Args:
            name: File name to inspect.

        Returns:
            str | None: Matching suffix as written in ``name``, otherwise ``None``.
        """

        lowered = name.lower()
        for suffix in self.archive_suffixes:
            if lowered.endswith(suffix) and len(name) > len(suffix):
                return name[-len(suffix) :]
        return None


DEFAULT_SETTINGS: Final[FinderSettings] = FinderSettings()


def load_settings(
    *,
    pyproject: Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> FinderSettings:
    """Return settings layered from defaults, ``pyproject.toml``, environment and overrides.

    Args:
        pyproject: Optional ``pyproject.toml`` whose ``[tool.modscan]`` table is applied.
        env: Environment mapping consulted for ``MODSCAN_*`` variables; defaults to ``os.environ``.
        overrides: Explicit values applied last, typically from CLI options.

    Returns:
        FinderSettings: Validated settings instance.

    Raises:
        ConfigError: If a source cannot be read or holds invalid values.
    """

    data: dict[str, Any] = {}
    if pyproject is not None:
        data.update(_load_pyproject_section(pyproject))
    data.update(_load_environment(os.environ if env is None else env))
    if overrides:
        data.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return FinderSettings(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def _load_pyproject_section(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"{path}: unable to read configuration") from exc
    tool_section = document.get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"{path}: [tool.modscan] must be a table")
    return {str(key).replace("-", "_"): value for key, value in section.items()}


def _load_environment(env: Mapping[str, str]) -> dict[str, Any]:
    fields = FinderSettings.model_fields
    data: dict[str, Any] = {}
    for key, value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in fields:
            data[field_name] = value
    return data


__all__ = (
    "ConfigError",
    "DEFAULT_SETTINGS",
    "FinderSettings",
    "load_settings",
)
