"""安装清单读取

清单记录某个环境中已安装的包，对解析过程是只读基线:

    [Foo]
    uuid = "7876af07-990d-54b4-ab0e-23690620f79a"
    version = "1.2.0"
    hash-sha1 = "..."
    deps = ["Bar"]

查找顺序（find_manifest）:
  1. 显式指定的清单路径
  2. 各 depot 下 environments/<env>/ 中已存在的清单文件
  3. 第一个 depot 下的默认位置（文件可以不存在，视为空清单）
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from uuid import UUID

from pkgresolve.core.dep.models import HASH_KEY, ManifestEntry
from pkgresolve.core.dep.versions import parse_version
from pkgresolve.core.exceptions import ConfigError, MalformedMetadataError
from pkgresolve.utils.toml_io import load_toml

logger = logging.getLogger(__name__)

MANIFEST_NAMES = ("PkgManifest.toml", "Manifest.toml")


def find_manifest(
    depots: Iterable[Path | str],
    environment: str = "default",
    manifest_path: str = "",
) -> Path:
    """定位当前环境的清单文件路径"""
    if manifest_path:
        return Path(manifest_path).expanduser().resolve()
    if not environment:
        raise ConfigError('无效的环境名: ""')

    depot_list = [Path(d) for d in depots]
    if not depot_list:
        raise ConfigError("未配置任何 depot")
    for depot in depot_list:
        for name in MANIFEST_NAMES:
            path = depot / "environments" / environment / name
            if path.is_file():
                return path
    return depot_list[0] / "environments" / environment / MANIFEST_NAMES[-1]


def load_manifest(path: Path | str) -> dict[str, ManifestEntry]:
    """加载清单，文件不存在时返回空清单"""
    p = Path(path)
    if not p.is_file():
        logger.info("清单文件不存在，按空环境处理: %s", p)
        return {}

    data = load_toml(p)
    manifest: dict[str, ManifestEntry] = {}
    for name, info in data.items():
        manifest[name] = _parse_entry(p, name, info)
    logger.info("已加载清单 %s: %d 个已安装包", p, len(manifest))
    return manifest


def _parse_entry(path: Path, name: str, info: object) -> ManifestEntry:
    if not isinstance(info, dict) or "uuid" not in info:
        raise MalformedMetadataError(f"清单条目 {name} 缺少 uuid", path)
    try:
        uuid = UUID(str(info["uuid"]))
        version = parse_version(info["version"]) if "version" in info else None
    except ValueError as e:
        raise MalformedMetadataError(f"清单条目 {name} 无效 ({e})", path) from e

    deps = info.get("deps", [])
    if isinstance(deps, dict):
        deps = list(deps)
    elif not isinstance(deps, list):
        raise MalformedMetadataError(f"清单条目 {name} 的 deps 无效", path)
    return ManifestEntry(
        name=name,
        uuid=uuid,
        version=version,
        hash_sha1=str(info.get(HASH_KEY, "")),
        deps=tuple(str(d) for d in deps),
    )
