# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for automatic module synthesis."""

from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from modscan.automatic import AutomaticModuleSynthesizer, derive_identity
from modscan.config import FinderSettings
from modscan.content import parse_manifest, scan_packages
from modscan.descriptor import ModuleDescriptor, RequiresModifier
from modscan.errors import ModuleFindError
from modscan.version import ModuleVersion

from helpers.modules import ModuleFactory


def _synthesize(path: Path) -> ModuleDescriptor:
    with zipfile.ZipFile(path) as archive:
        return AutomaticModuleSynthesizer().synthesize(archive, file_name=path.name, source=str(path))


@pytest.mark.parametrize(
    ("file_name", "name", "version"),
    [
        ("foo-bar.jar", "foo.bar", None),
        ("foo-1.2.3-SNAPSHOT.jar", "foo", "1.2.3-SNAPSHOT"),
        ("my--thing_1.jar", "my.thing.1", None),
        ("a-2b.jar", "a.2b", None),
        ("lib-2.jar", "lib", "2"),
        ("..weird__name..zip", "weird.name", None),
        ("commons-io-2.11.0.jar", "commons.io", "2.11.0"),
    ],
)
def test_derive_identity(file_name: str, name: str, version: str | None) -> None:
    identity = derive_identity(file_name)

    assert identity.name == name
    assert identity.version_text == version


def test_derive_identity_drops_unparsable_version() -> None:
    identity = derive_identity("tool-1.x..y.jar")

    assert identity.name == "tool"
    assert identity.version_text is None


def test_derive_identity_requires_a_name() -> None:
    with pytest.raises(ModuleFindError):
        derive_identity("-1.0.jar")


def test_synthesized_descriptor_exports_class_namespaces(modules: ModuleFactory, class_bytes: bytes) -> None:
    path = modules.jar(
        "foo-1.0.jar",
        {
            "com/example/Foo.class": class_bytes,
            "com/example/impl/FooImpl.class": class_bytes,
            "com/example/readme.txt": "not a class",
            "META-INF/versions/11/com/example/Foo.class": class_bytes,
        },
    )

    descriptor = _synthesize(path)

    assert descriptor.name == "foo"
    assert descriptor.version == ModuleVersion.parse("1.0")
    assert descriptor.is_automatic
    assert descriptor.exports == frozenset({"com.example", "com.example.impl"})
    assert descriptor.packages == descriptor.exports
    assert [(clause.name, clause.modifiers) for clause in descriptor.requires] == [
        ("java.base", frozenset({RequiresModifier.MANDATED})),
    ]


def test_root_namespace_class_is_rejected(modules: ModuleFactory, class_bytes: bytes) -> None:
    path = modules.jar("bad.jar", {"Main.class": class_bytes, "ok/Fine.class": class_bytes})

    with pytest.raises(ModuleFindError) as excinfo:
        _synthesize(path)

    assert "Main.class" in str(excinfo.value)


def test_service_files_become_provides(modules: ModuleFactory, class_bytes: bytes) -> None:
    path = modules.jar(
        "plugins.jar",
        {
            "org/acme/PluginA.class": class_bytes,
            "META-INF/services/org.acme.spi.Plugin": "# providers\norg.acme.PluginA\n\norg.acme.PluginB # trailing\n",
            "META-INF/services/org.acme.spi.Codec": "org.acme.Codec\n",
        },
    )

    descriptor = _synthesize(path)

    assert descriptor.provides_map == {
        "org.acme.spi.Codec": ("org.acme.Codec",),
        "org.acme.spi.Plugin": ("org.acme.PluginA", "org.acme.PluginB"),
    }


def test_malformed_provider_name_is_rejected(modules: ModuleFactory) -> None:
    path = modules.jar("svc.jar", {"META-INF/services/org.acme.Spi": "not-a-class\n"})

    with pytest.raises(ModuleFindError):
        _synthesize(path)


def test_manifest_supplies_main_class_and_name(modules: ModuleFactory, class_bytes: bytes) -> None:
    manifest = (
        "Manifest-Version: 1.0\r\n"
        "Main-Class: org.acme.cli.La\r\n"
        " uncher\r\n"
        "Automatic-Module-Name: org.acme.cli\r\n"
        "\r\n"
        "Name: org/acme/cli/\r\n"
        "Main-Class: ignored.Main\r\n"
    )
    path = modules.jar("acme-cli-3.0.jar", {"META-INF/MANIFEST.MF": manifest, "org/acme/cli/Launcher.class": class_bytes})

    descriptor = _synthesize(path)

    assert descriptor.name == "org.acme.cli"
    assert descriptor.raw_version == "3.0"
    assert descriptor.main_class == "org.acme.cli.Launcher"


def test_empty_archive_yields_module_without_packages(modules: ModuleFactory) -> None:
    descriptor = _synthesize(modules.jar("empty-0.1.jar"))

    assert descriptor.name == "empty"
    assert descriptor.exports == frozenset()
    assert descriptor.provides == ()


def test_manifest_name_is_used_when_file_name_yields_none(modules: ModuleFactory, class_bytes: bytes) -> None:
    path = modules.jar(
        "-1.0.jar",
        {"META-INF/MANIFEST.MF": "Manifest-Version: 1.0\nAutomatic-Module-Name: org.acme\n", "org/acme/A.class": class_bytes},
    )

    descriptor = _synthesize(path)

    assert descriptor.name == "org.acme"
    assert descriptor.raw_version == "1.0"


def test_manifest_attribute_names_ignore_case(modules: ModuleFactory, class_bytes: bytes) -> None:
    manifest = "manifest-version: 1.0\nmain-class: org.acme.Main\nAUTOMATIC-MODULE-NAME: org.acme.app\n"
    path = modules.jar("acme-2.0.jar", {"META-INF/MANIFEST.MF": manifest, "org/acme/Main.class": class_bytes})

    descriptor = _synthesize(path)

    assert descriptor.name == "org.acme.app"
    assert descriptor.main_class == "org.acme.Main"


def test_parse_manifest_lowercases_names_and_joins_continuations() -> None:
    attributes = parse_manifest("Main-Class: org.acme.La\n uncher\nX-Custom: value\n\nName: ignored\nMain-Class: other\n")

    assert attributes == {"main-class": "org.acme.Launcher", "x-custom": "value"}


def test_scan_packages_rejects_root_classes() -> None:
    entries = ["module-info.json", "META-INF/Ignored.class", "a/b/C.class", "Root.class"]

    with pytest.raises(ModuleFindError) as excinfo:
        scan_packages(entries, FinderSettings(), source="unit")

    assert str(excinfo.value) == "unit: Root.class found in top-level directory (unnamed package not allowed)"
    assert scan_packages(entries[:3], FinderSettings(), source="unit") == frozenset({"a.b"})
