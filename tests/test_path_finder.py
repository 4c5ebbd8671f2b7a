# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for module path finders."""

from __future__ import annotations

from pathlib import Path

import pytest

import modscan
from modscan.errors import DuplicateModuleError, InvalidDescriptorError, ModuleFindError
from modscan.finder import ScanState
from modscan.path import ModulePathFinder

from helpers.modules import ModuleFactory, patch_first_entry


def test_construction_performs_no_io(tmp_path: Path) -> None:
    finder = modscan.of(tmp_path / "missing", tmp_path / "also-missing.jar")

    assert finder.state is ScanState.UNSCANNED
    assert finder.entries == (tmp_path / "missing", tmp_path / "also-missing.jar")


def test_find_packaged_exploded_and_automatic_modules(modules: ModuleFactory, tmp_path: Path, class_bytes: bytes) -> None:
    modules.modular_jar("mods/app.jar", "com.example.app", {"com/example/app/Main.class": class_bytes}, version="1.0")
    modules.exploded("mods/lib", "com.example.lib", {"com/example/lib/Util.class": class_bytes}, exports=["com.example.lib"])
    modules.jar("mods/helper-2.5.jar", {"org/helper/Help.class": class_bytes})

    finder = modscan.of(tmp_path / "mods")

    app = finder.find("com.example.app")
    lib = finder.find("com.example.lib")
    helper = finder.find("helper")
    assert app is not None and lib is not None and helper is not None
    assert app.descriptor.raw_version == "1.0"
    assert app.descriptor.packages == frozenset({"com.example.app"})
    assert lib.descriptor.exports == frozenset({"com.example.lib"})
    assert helper.descriptor.is_automatic
    assert helper.descriptor.raw_version == "2.5"
    assert app.location == (tmp_path / "mods" / "app.jar").resolve().as_uri()
    assert finder.find("com.example.missing") is None


def test_find_is_idempotent(modules: ModuleFactory) -> None:
    jar = modules.modular_jar("a.jar", "a")
    finder = modscan.of(jar)

    assert finder.find("a") == finder.find("a")
    assert finder.find("b") is None
    assert finder.find("b") is None


def test_find_all_is_consistent_with_find(modules: ModuleFactory, tmp_path: Path) -> None:
    modules.modular_jar("mods/a.jar", "a")
    modules.exploded("mods/b", "b")
    modules.jar("extra/c-1.0.jar")
    finder = modscan.of(tmp_path / "mods", tmp_path / "extra")

    references = finder.find_all()

    assert {reference.name for reference in references} == {"a", "b", "c"}
    for reference in references:
        assert finder.find(reference.name) == reference
    assert finder.find_all() is references
    assert finder.state is ScanState.SCANNED


def test_earlier_entry_takes_precedence(modules: ModuleFactory, tmp_path: Path) -> None:
    first = modules.modular_jar("first/m.jar", "m", version="1.0")
    modules.modular_jar("second/m.jar", "m", version="2.0")
    finder = modscan.of(tmp_path / "first", tmp_path / "second")

    found = finder.find("m")
    assert found is not None
    assert found.location == first.resolve().as_uri()

    all_m = [reference for reference in modscan.of(tmp_path / "first", tmp_path / "second").find_all() if reference.name == "m"]
    assert [reference.descriptor.raw_version for reference in all_m] == ["1.0"]


def test_find_stops_at_first_matching_entry(modules: ModuleFactory, tmp_path: Path) -> None:
    good = modules.modular_jar("good.jar", "good")
    broken = tmp_path / "broken"
    broken.mkdir()
    (broken / "x.jar").write_bytes(b"garbage")
    finder = modscan.of(good, broken)

    assert finder.find("good") is not None
    with pytest.raises(ModuleFindError):
        finder.find("other")


def test_duplicate_in_one_directory_fails(modules: ModuleFactory, tmp_path: Path) -> None:
    modules.modular_jar("mods/m1.jar", "m")
    modules.exploded("mods/m2", "m")
    finder = modscan.of(tmp_path / "mods")

    with pytest.raises(DuplicateModuleError) as excinfo:
        finder.find_all()

    assert excinfo.value.name == "m"
    assert {excinfo.value.first.name, excinfo.value.second.name} == {"m1.jar", "m2"}


def test_duplicate_automatic_names_in_one_directory_fail(modules: ModuleFactory, tmp_path: Path) -> None:
    modules.jar("mods/foo-1.0.jar")
    modules.jar("mods/foo-2.0.jar")

    with pytest.raises(DuplicateModuleError):
        modscan.of(tmp_path / "mods").find("foo")


def test_failed_finder_keeps_failing(modules: ModuleFactory, tmp_path: Path) -> None:
    modules.modular_jar("mods/bad.jar", "bad", exports=["missing"], packages=[])
    modules.modular_jar("mods/fine.jar", "fine")
    finder = modscan.of(tmp_path / "mods")

    with pytest.raises(InvalidDescriptorError):
        finder.find("fine")

    assert finder.state is ScanState.FAILED
    with pytest.raises(ModuleFindError):
        finder.find("fine")
    with pytest.raises(ModuleFindError):
        finder.find_all()


def test_root_namespace_class_fails_discovery(modules: ModuleFactory, class_bytes: bytes) -> None:
    jar = modules.jar("rooted.jar", {"Root.class": class_bytes})

    with pytest.raises(ModuleFindError) as excinfo:
        modscan.of(jar).find_all()

    assert "Root.class" in str(excinfo.value)


def test_root_namespace_class_in_scanned_modular_jar_fails(modules: ModuleFactory, class_bytes: bytes) -> None:
    jar = modules.modular_jar("a.jar", "a", {"Root.class": class_bytes, "a/pkg/A.class": class_bytes})
    finder = modscan.of(jar)

    with pytest.raises(ModuleFindError) as excinfo:
        finder.find("a")

    assert "Root.class" in str(excinfo.value)
    assert finder.state is ScanState.FAILED


def test_root_namespace_class_in_scanned_exploded_module_fails(modules: ModuleFactory, class_bytes: bytes) -> None:
    directory = modules.exploded("b", "b", {"Root.class": class_bytes})

    with pytest.raises(ModuleFindError) as excinfo:
        modscan.of(directory).find("b")

    assert "Root.class" in str(excinfo.value)


def test_declared_packages_skip_the_content_scan(modules: ModuleFactory, class_bytes: bytes) -> None:
    jar = modules.modular_jar("a.jar", "a", {"Root.class": class_bytes}, packages=["a.pkg"])

    reference = modscan.of(jar).find("a")

    assert reference is not None
    assert reference.descriptor.packages == frozenset({"a.pkg"})


@pytest.mark.parametrize(
    ("patch", "cause"),
    [
        ({"method": 99}, NotImplementedError),
        ({"flags": 0x1}, RuntimeError),
    ],
    ids=["unsupported-compression", "encrypted"],
)
def test_undecodable_archive_member_fails_the_finder(
    modules: ModuleFactory,
    patch: dict[str, int],
    cause: type[Exception],
) -> None:
    jar = modules.modular_jar("c.jar", "c")
    patch_first_entry(jar, **patch)
    finder = modscan.of(jar)

    with pytest.raises(ModuleFindError) as excinfo:
        finder.find("c")

    assert isinstance(excinfo.value.__cause__, cause)
    assert finder.state is ScanState.FAILED
    with pytest.raises(ModuleFindError):
        finder.find_all()


def test_undecodable_manifest_of_automatic_module_fails(modules: ModuleFactory, class_bytes: bytes) -> None:
    jar = modules.jar("auto-1.0.jar", {"META-INF/MANIFEST.MF": "Manifest-Version: 1.0\n", "auto/A.class": class_bytes})
    patch_first_entry(jar, method=99)

    with pytest.raises(ModuleFindError) as excinfo:
        modscan.of(jar).find("auto")

    assert isinstance(excinfo.value.__cause__, NotImplementedError)


def test_unreadable_archive_chains_cause(tmp_path: Path) -> None:
    jar = tmp_path / "truncated.jar"
    jar.write_bytes(b"PK\x03\x04 truncated")

    with pytest.raises(ModuleFindError) as excinfo:
        modscan.of(jar).find("anything")

    assert excinfo.value.__cause__ is not None


def test_unrecognised_top_level_file_fails(tmp_path: Path) -> None:
    stray = tmp_path / "notes.txt"
    stray.write_text("not a module", encoding="utf-8")

    with pytest.raises(ModuleFindError):
        modscan.of(stray).find_all()


def test_missing_entries_are_ignored(modules: ModuleFactory, tmp_path: Path) -> None:
    modules.modular_jar("mods/a.jar", "a")
    modules.exploded("mods/b", "b")

    with_missing = modscan.of(tmp_path / "nope", tmp_path / "mods", tmp_path / "nope.jar").find_all()
    without = modscan.of(tmp_path / "mods").find_all()

    assert with_missing == without


def test_duplicate_entries_are_harmless(modules: ModuleFactory) -> None:
    jar = modules.modular_jar("a.jar", "a")
    finder = ModulePathFinder([jar, str(jar)])

    assert {reference.name for reference in finder.find_all()} == {"a"}


def test_reference_opens_packaged_content(modules: ModuleFactory, class_bytes: bytes) -> None:
    jar = modules.modular_jar("a.jar", "a", {"a/pkg/A.class": class_bytes, "a/pkg/data.txt": "payload"})
    reference = modscan.of(jar).find("a")
    assert reference is not None

    with reference.open() as reader:
        assert set(reader.list()) == {"module-info.json", "a/pkg/A.class", "a/pkg/data.txt"}
        assert reader.read("a/pkg/data.txt") == b"payload"
        assert reader.read("a/pkg/missing.txt") is None
        assert reader.find("a/pkg/A.class") == f"jar:{jar.resolve().as_uri()}!/a/pkg/A.class"
    assert reader.closed


def test_reference_opens_exploded_content(modules: ModuleFactory) -> None:
    directory = modules.exploded("b", "b", {"b/res/config.txt": "cfg"})
    reference = modscan.of(directory).find("b")
    assert reference is not None

    with reference.open() as reader:
        assert reader.read("b/res/config.txt") == b"cfg"
        assert reader.read("../escape.txt") is None
        assert reader.find("b/res/config.txt") == (directory / "b" / "res" / "config.txt").resolve().as_uri()
    with pytest.raises(ValueError):
        reader.list()
