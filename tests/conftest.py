"""测试共享 fixture — 在 tmp_path 下搭建临时 depot

目录结构:

  <depot>/
    registries/<reg>/registry.toml
    registries/<reg>/packages.toml          每行: <uuid> = { name = "...", path = "..." }
    registries/<reg>/<P>/<Name>/package.toml
                                versions.toml
                                requirements.toml
                                compatibility.toml
    environments/<env>/Manifest.toml
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any
from uuid import UUID

import pytest

from pkgresolve.utils.logger import reset_logging


def _toml_value(v: Any) -> str:
    if isinstance(v, dict):
        return "{ " + ", ".join(f"{json.dumps(k)} = {_toml_value(x)}" for k, x in v.items()) + " }"
    return json.dumps(v)


def sha1_of(name: str, version: str) -> str:
    return hashlib.sha1(f"{name}@{version}".encode()).hexdigest()


class RegistryBuilder:
    """单个注册表的写入器"""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.listing = self.root / "packages.toml"
        if not self.listing.exists():
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / "registry.toml").write_text(
                f'name = "{root.name}"\n', encoding="utf-8",
            )
            self.listing.write_text("", encoding="utf-8")

    def add_line(self, line: str) -> None:
        with open(self.listing, "a", encoding="utf-8") as f:
            f.write(line + "\n")

    def package(
        self,
        name: str,
        uuid: UUID,
        versions: dict[str, dict[str, UUID]],
        *,
        repo: str = "",
        compat: dict[str, dict[str, str]] | None = None,
        path: str = "",
    ) -> Path:
        """注册一个包: versions 为 版本 -> {依赖名: 依赖 UUID}"""
        rel = path or f"{name[0].upper()}/{name}"
        self.add_line(f'{uuid} = {{ name = "{name}", path = "{rel}" }}')
        pkg_dir = self.root / rel
        pkg_dir.mkdir(parents=True, exist_ok=True)

        (pkg_dir / "package.toml").write_text(
            f'name = "{name}"\nuuid = "{uuid}"\nrepo = "{repo}"\n',
            encoding="utf-8",
        )
        lines = []
        for ver in versions:
            lines += [f'["{ver}"]', f'hash-sha1 = "{sha1_of(name, ver)}"', ""]
        (pkg_dir / "versions.toml").write_text("\n".join(lines), encoding="utf-8")

        lines = []
        for ver, deps in versions.items():
            lines.append(f'["{ver}"]')
            lines += [f'{dep} = "{dep_uuid}"' for dep, dep_uuid in deps.items()]
            lines.append("")
        (pkg_dir / "requirements.toml").write_text("\n".join(lines), encoding="utf-8")

        if compat is not None:
            lines = []
            for ver, specs in compat.items():
                lines.append(f'["{ver}"]')
                lines += [f'{dep} = "{spec}"' for dep, spec in specs.items()]
                lines.append("")
            (pkg_dir / "compatibility.toml").write_text(
                "\n".join(lines), encoding="utf-8",
            )
        return pkg_dir


class DepotBuilder:
    """临时 depot"""

    sha1_of = staticmethod(sha1_of)

    def __init__(self, root: Path) -> None:
        self.root = root
        (self.root / "registries").mkdir(parents=True, exist_ok=True)

    def registry(self, name: str) -> RegistryBuilder:
        return RegistryBuilder(self.root / "registries" / name)

    def manifest(self, entries: dict[str, dict[str, Any]], env: str = "default") -> Path:
        """写入环境清单: 包名 -> {uuid, version, ...}"""
        path = self.root / "environments" / env / "Manifest.toml"
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = []
        for name, info in entries.items():
            lines.append(f"[{name}]")
            lines += [f"{k} = {_toml_value(v)}" for k, v in info.items()]
            lines.append("")
        path.write_text("\n".join(lines), encoding="utf-8")
        return path


@pytest.fixture()
def depot(tmp_path: Path) -> DepotBuilder:
    return DepotBuilder(tmp_path / "depot")


@pytest.fixture(autouse=True)
def _clean_logging():
    yield
    reset_logging()
