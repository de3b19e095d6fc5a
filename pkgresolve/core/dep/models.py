"""依赖解析数据模型

数据类:
- ManifestEntry:    清单中已安装的包（只读基线）
- AvailableVersion: 注册表声明的某个包版本（不可变、内容寻址）
- Ambiguity:        一个包名对应多个 UUID 的候选列表
- Resolution:       一次解析的完整产物
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from uuid import UUID

from semantic_version import Version

from pkgresolve.core.dep.versions import VersionSpec

# 注册表目录约定
REGISTRY_FILE = "registry.toml"
PACKAGES_FILE = "packages.toml"
PACKAGE_FILE = "package.toml"
VERSIONS_FILE = "versions.toml"
REQUIREMENTS_FILE = "requirements.toml"
COMPATIBILITY_FILE = "compatibility.toml"

HASH_KEY = "hash-sha1"

# name --> uuid --> 包元数据目录（绝对路径，按注册表发现顺序）
RegistryIndex = dict[str, dict[UUID, list[Path]]]


@dataclass(frozen=True)
class ManifestEntry:
    """清单中已安装的包"""

    name: str
    uuid: UUID
    version: Version | None = None
    hash_sha1: str = ""
    deps: tuple[str, ...] = ()


@dataclass(frozen=True)
class AvailableVersion:
    """某个包的一个可用版本"""

    version: Version
    hash_sha1: str
    requires: dict[str, UUID] = field(default_factory=dict)  # 依赖包名 -> UUID
    compatibility: dict[str, str] = field(default_factory=dict)  # 依赖包名 -> 原始约束

    def __hash__(self) -> int:
        return hash((self.version, self.hash_sha1))


# name --> version --> AvailableVersion
DependencyGraph = dict[str, dict[Version, AvailableVersion]]


@dataclass
class Ambiguity:
    """一个包名在多个注册表中对应不同 UUID

    descriptor 为候选包的简短描述（通常是源码仓库 URL），
    仅在需要展示时才读取 package.toml。
    """

    name: str
    uuids: list[UUID]
    describe: Callable[[UUID], str] | None = field(default=None, repr=False)
    _candidates: list[tuple[UUID, str]] | None = field(
        default=None, init=False, repr=False, compare=False,
    )

    @property
    def candidates(self) -> list[tuple[UUID, str]]:
        if self._candidates is None:
            describe = self.describe or (lambda _uuid: "")
            self._candidates = [(u, describe(u)) for u in sorted(self.uuids)]
        return self._candidates


@dataclass
class Resolution:
    """一次解析的产物

    - uuids:        包名 -> 固定的 UUID（含清单中的包）
    - where:        包名 -> 固定 UUID 的元数据目录
    - graph:        依赖图（已按约束与身份冲突过滤）
    - versions:     UUID -> 版本 -> 内容哈希，交给求解器的候选表
    - requirements: 交给求解器的顶层约束（已满足的请求被剔除）
    """

    uuids: dict[str, UUID] = field(default_factory=dict)
    where: dict[str, list[Path]] = field(default_factory=dict)
    graph: DependencyGraph = field(default_factory=dict)
    versions: dict[UUID, dict[Version, str]] = field(default_factory=dict)
    requirements: dict[str, VersionSpec] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """转为可 JSON 序列化的字典（键有序，保证多次运行输出一致）"""
        return {
            "uuids": {n: str(u) for n, u in sorted(self.uuids.items())},
            "where": {
                n: [str(p) for p in paths] for n, paths in sorted(self.where.items())
            },
            "requirements": {
                n: str(s) for n, s in sorted(self.requirements.items())
            },
            "graph": {
                name: {
                    str(ver): {
                        "hash-sha1": av.hash_sha1,
                        "requires": {
                            d: str(u) for d, u in sorted(av.requires.items())
                        },
                    }
                    for ver, av in sorted(vers.items())
                }
                for name, vers in sorted(self.graph.items())
            },
            "versions": {
                str(uuid): {str(v): h for v, h in sorted(vers.items())}
                for uuid, vers in sorted(self.versions.items())
            },
        }
