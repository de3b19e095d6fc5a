"""注册表索引构建

职责:
- 在各 depot 的 registries/ 下发现有效注册表
- 逐行扫描 packages.toml，只解析包名命中的记录
- 产出 name -> uuid -> [包元数据目录] 映射

packages.toml 每行一条记录:
    <uuid> = { name = "<name>", path = "<relative-path>" }

大型注册表的清单很长，先用包名正则做字符串预过滤，命中后再做完整语法匹配；
命中预过滤但语法不符的行视为注册表损坏。
"""

from __future__ import annotations

import logging
import re
import tomllib
from collections.abc import Iterable
from pathlib import Path
from uuid import UUID

from pkgresolve.core.dep.models import (
    PACKAGE_FILE,
    PACKAGES_FILE,
    REGISTRY_FILE,
    RegistryIndex,
)
from pkgresolve.core.exceptions import MalformedMetadataError
from pkgresolve.utils.toml_io import load_toml

logger = logging.getLogger(__name__)

_STR = r'"((?:[^"\\]|\\.)*)"'

LINE_RE = re.compile(
    r"""
    ^ \s*
    ([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})
    \s* = \s* \{
    \s* name \s* = \s* """ + _STR + r""" \s* ,
    \s* path \s* = \s* """ + _STR + r""" \s* ,?
    \s* \} \s* $
    """,
    re.VERBOSE,
)


def _name_filter(names: Iterable[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(n) for n in sorted(names))
    return re.compile(rf'\bname\s*=\s*"(?:{alternatives})"')


def _unescape(raw: str) -> str:
    """按 TOML 基本字符串规则反转义"""
    return tomllib.loads(f'v = "{raw}"')["v"]


def discover_registries(depot: Path) -> list[Path]:
    """列出 depot 下同时具备 registry.toml 与 packages.toml 的注册表目录"""
    root = depot / "registries"
    if not root.is_dir():
        logger.debug("depot 下没有 registries 目录: %s", depot)
        return []
    return [
        d for d in sorted(root.iterdir())
        if (d / REGISTRY_FILE).is_file() and (d / PACKAGES_FILE).is_file()
    ]


def discover_all(depots: Iterable[Path]) -> list[Path]:
    """按 depot 顺序汇总所有注册表"""
    return [reg for depot in depots for reg in discover_registries(Path(depot))]


def read_descriptor(path: Path) -> str:
    """读取包目录下 package.toml 的 repo 字段，作为歧义提示"""
    try:
        info = load_toml(path / PACKAGE_FILE)
    except FileNotFoundError:
        return ""
    return str(info.get("repo", ""))


class RegistryIndexBuilder:
    """注册表索引构建器 - 每次调用都重新读取，不做跨调用缓存"""

    def __init__(self, depots: Iterable[Path | str]) -> None:
        self.depots = [Path(d) for d in depots]

    def registries(self) -> list[Path]:
        return discover_all(self.depots)

    def find_registered(self, names: Iterable[str]) -> RegistryIndex:
        """查找包名在各注册表中的 UUID 与元数据目录

        未找到的包名不会出现在结果中（由调用方判定 NotFound）。
        """
        wanted = set(names)
        where: RegistryIndex = {}
        if not wanted:
            return where

        name_re = _name_filter(wanted)
        for registry in self.registries():
            self._scan(registry, wanted, name_re, where)

        logger.debug(
            "索引完成: 请求 %d 个包名, 命中 %d 个", len(wanted), len(where),
        )
        return where

    def _scan(
        self,
        registry: Path,
        wanted: set[str],
        name_re: re.Pattern[str],
        where: RegistryIndex,
    ) -> None:
        packages_file = registry / PACKAGES_FILE
        seen: dict[str, UUID] = {}
        with open(packages_file, encoding="utf-8") as io:
            for lineno, line in enumerate(io, start=1):
                if not name_re.search(line):
                    continue
                m = LINE_RE.match(line)
                if m is None:
                    raise MalformedMetadataError(
                        f"packages.toml 第 {lineno} 行格式错误",
                        packages_file, line.rstrip("\n"),
                    )
                uuid = UUID(m.group(1))
                try:
                    name = _unescape(m.group(2))
                    path = _unescape(m.group(3))
                except tomllib.TOMLDecodeError as e:
                    raise MalformedMetadataError(
                        f"packages.toml 第 {lineno} 行转义非法 ({e})",
                        packages_file, line.rstrip("\n"),
                    ) from e
                if name not in wanted:
                    continue
                if seen.setdefault(name, uuid) != uuid:
                    raise MalformedMetadataError(
                        f"同一注册表中 {name} 对应多个 UUID "
                        f"({seen[name]}, {uuid})",
                        packages_file, line.rstrip("\n"),
                    )
                paths = where.setdefault(name, {}).setdefault(uuid, [])
                location = (registry / path).resolve()
                if location not in paths:
                    paths.append(location)
        logger.debug(
            "扫描 %s: 命中 %d 个包名", registry.name, len(seen),
            extra={"registry": str(registry)},
        )
