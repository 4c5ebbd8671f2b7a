# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from helpers.modules import ModuleFactory


@pytest.fixture
def modules(tmp_path: Path) -> ModuleFactory:
    """Return a factory writing test modules below ``tmp_path``."""

    return ModuleFactory(root=tmp_path)


@pytest.fixture
def class_bytes() -> bytes:
    """Return placeholder compiled class bytes."""

    return b"\xca\xfe\xba\xbe\x00\x00\x00\x41"
