"""安装清单定位与读取单元测试"""

from __future__ import annotations

from pathlib import Path
from uuid import UUID

import pytest
from semantic_version import Version

from pkgresolve.core.dep.manifest import find_manifest, load_manifest
from pkgresolve.core.exceptions import ConfigError, MalformedMetadataError

FOO = UUID("7876af07-990d-54b4-ab0e-23690620f79a")
BAR = UUID("00000000-0000-4000-8000-0000000000aa")


class TestFindManifest:
    def test_explicit_path_wins(self, depot, tmp_path: Path) -> None:
        depot.manifest({"Foo": {"uuid": str(FOO)}})
        explicit = tmp_path / "custom.toml"
        assert find_manifest([depot.root], "default", str(explicit)) == explicit.resolve()

    def test_existing_environment_manifest(self, depot, tmp_path: Path) -> None:
        other = type(depot)(tmp_path / "other")
        path = other.manifest({"Foo": {"uuid": str(FOO)}}, env="dev")
        assert find_manifest([depot.root, other.root], "dev") == path

    def test_default_location_when_absent(self, depot) -> None:
        path = find_manifest([depot.root], "dev")
        assert path == depot.root / "environments" / "dev" / "Manifest.toml"
        assert not path.exists()

    def test_empty_environment_raises(self, depot) -> None:
        with pytest.raises(ConfigError, match="无效的环境名"):
            find_manifest([depot.root], "")


class TestLoadManifest:
    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert load_manifest(tmp_path / "Manifest.toml") == {}

    def test_entries(self, depot) -> None:
        path = depot.manifest({
            "Foo": {"uuid": str(FOO), "version": "1.2.0", "hash-sha1": "ab" * 20},
        })
        manifest = load_manifest(path)
        entry = manifest["Foo"]
        assert entry.uuid == FOO
        assert entry.version == Version("1.2.0")
        assert entry.hash_sha1 == "ab" * 20

    def test_entry_without_version(self, depot) -> None:
        path = depot.manifest({"Foo": {"uuid": str(FOO)}})
        assert load_manifest(path)["Foo"].version is None

    def test_missing_uuid_raises(self, depot) -> None:
        path = depot.manifest({"Foo": {"version": "1.0.0"}})
        with pytest.raises(MalformedMetadataError, match="缺少 uuid"):
            load_manifest(path)

    def test_invalid_uuid_raises(self, depot) -> None:
        path = depot.manifest({"Foo": {"uuid": "not-a-uuid"}})
        with pytest.raises(MalformedMetadataError, match="无效"):
            load_manifest(path)

    def test_bad_toml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "Manifest.toml"
        path.write_text("[Foo\nuuid = ", encoding="utf-8")
        with pytest.raises(MalformedMetadataError, match="TOML 语法错误"):
            load_manifest(path)

    def test_deps_list_and_table(self, depot) -> None:
        path = depot.manifest({
            "Foo": {"uuid": str(FOO), "deps": ["Bar", "Baz"]},
            "Bar": {"uuid": str(BAR), "deps": {"Baz": str(FOO)}},
        })
        manifest = load_manifest(path)
        assert manifest["Foo"].deps == ("Bar", "Baz")
        assert manifest["Bar"].deps == ("Baz",)

    def test_bad_deps_raises(self, depot) -> None:
        path = depot.manifest({"Foo": {"uuid": str(FOO), "deps": "Bar"}})
        with pytest.raises(MalformedMetadataError, match="deps 无效"):
            load_manifest(path)
