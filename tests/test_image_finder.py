# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for installed runtime image finders."""

from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

import modscan
from modscan.errors import CatalogAccessDenied, ImageLayoutError, ModuleFindError
from modscan.finder import ScanState
from modscan.image import InstalledImageFinder
from modscan.path import ModulePathFinder

from helpers.modules import ModuleFactory, descriptor_document, patch_first_entry


class _DenyGate:
    def __init__(self) -> None:
        self.checked: list[Path] = []

    def check_read(self, path: Path) -> None:
        self.checked.append(path)
        raise CatalogAccessDenied(f"reading {path} is not permitted")


def test_packed_image_serves_its_modules(modules: ModuleFactory) -> None:
    home = modules.image(
        "jdk",
        {
            "java.base": {"version": "21", "exports": ["java.lang"], "packages": ["java.lang", "jdk.internal"]},
            "java.sql": {"requires": [{"name": "java.logging", "modifiers": ["transitive"]}], "packages": ["java.sql"]},
            "java.logging": {"packages": ["java.util.logging"]},
        },
    )

    finder = modscan.of_installed(home)

    assert isinstance(finder, InstalledImageFinder)
    assert {reference.name for reference in finder.find_all()} == {"java.base", "java.logging", "java.sql"}
    base = finder.find("java.base")
    assert base is not None
    assert base.location == "image:///java.base"
    assert base.descriptor.requires == frozenset()
    assert base.descriptor.packages == frozenset({"java.lang", "jdk.internal"})
    assert finder.find("java.desktop") is None


def test_packed_image_reader_is_scoped_to_one_module(modules: ModuleFactory) -> None:
    home = modules.image("jdk", {"java.base": {"packages": ["java.lang"]}, "java.sql": {"packages": ["java.sql"]}})
    reference = modscan.of_installed(home).find("java.sql")
    assert reference is not None

    with reference.open() as reader:
        assert set(reader.list()) == {"module-info.json", "java/sql/Type.class"}
        assert reader.find("java/sql/Type.class") == "image:///java.sql/java/sql/Type.class"
        assert reader.read("java/lang/Type.class") is None


def test_image_module_without_descriptor_fails(tmp_path: Path) -> None:
    image = tmp_path / "jdk" / "lib" / "modules"
    image.parent.mkdir(parents=True)
    with zipfile.ZipFile(image, "w") as archive:
        archive.writestr("java.base/module-info.json", descriptor_document("java.base"))
        archive.writestr("orphan/some/Type.class", b"")

    finder = modscan.of_installed(tmp_path / "jdk")

    with pytest.raises(ModuleFindError):
        finder.find("java.base")
    with pytest.raises(ModuleFindError):
        finder.find_all()


def test_image_directory_name_must_match_module(tmp_path: Path) -> None:
    image = tmp_path / "jdk" / "lib" / "modules"
    image.parent.mkdir(parents=True)
    with zipfile.ZipFile(image, "w") as archive:
        archive.writestr("java.base/module-info.json", descriptor_document("java.core"))

    with pytest.raises(ModuleFindError):
        modscan.of_installed(tmp_path / "jdk").find_all()


def test_exploded_image_falls_back_to_module_path(modules: ModuleFactory, tmp_path: Path) -> None:
    modules.exploded("jdk/modules/java.base", "java.base")
    modules.exploded("jdk/modules/java.xml", "java.xml")

    finder = modscan.of_installed(tmp_path / "jdk")

    assert isinstance(finder, ModulePathFinder)
    assert {reference.name for reference in finder.find_all()} == {"java.base", "java.xml"}


def test_unrecognised_installation_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "jdk").mkdir()

    with pytest.raises(ImageLayoutError):
        modscan.of_installed(tmp_path / "jdk")


def test_permission_gate_is_consulted_first(tmp_path: Path) -> None:
    gate = _DenyGate()

    with pytest.raises(CatalogAccessDenied) as excinfo:
        modscan.of_installed(tmp_path / "absent", permission_gate=gate)

    assert isinstance(excinfo.value, PermissionError)
    assert gate.checked == [tmp_path / "absent"]


def test_undecodable_image_member_fails_the_finder(modules: ModuleFactory) -> None:
    home = modules.image("jdk", {"java.base": {"packages": ["java.lang"]}})
    patch_first_entry(home / "lib" / "modules", method=99)
    finder = modscan.of_installed(home)

    with pytest.raises(ModuleFindError) as excinfo:
        finder.find("java.base")

    assert isinstance(excinfo.value.__cause__, NotImplementedError)
    assert finder.state is ScanState.FAILED


def test_root_namespace_class_in_image_module_fails(tmp_path: Path) -> None:
    image = tmp_path / "jdk" / "lib" / "modules"
    image.parent.mkdir(parents=True)
    with zipfile.ZipFile(image, "w") as archive:
        archive.writestr("java.base/module-info.json", descriptor_document("java.base"))
        archive.writestr("java.base/Root.class", b"\xca\xfe\xba\xbe")

    with pytest.raises(ModuleFindError) as excinfo:
        modscan.of_installed(tmp_path / "jdk").find_all()

    assert "Root.class" in str(excinfo.value)
