"""依赖图收集器

从请求的包名出发，沿依赖边向外扩展，收集每个包满足约束的候选版本。

分两个阶段，保证结果与处理顺序无关:

  1. 发现: 用显式工作队列从请求包名出发求可达集合（visited 集合保证每个包名
     只处理一次），只经由可行版本扩展: 依赖的 UUID 与已固定身份冲突的版本
     不引入任何依赖。读取新可达包的元数据，保留满足请求约束的版本；
     未索引的包名按批次交给索引构建器和身份解析器。身份只增不改，
     重复上述过程直到没有新包名。
  2. 过滤: 所有身份都已固定后，剔除依赖 UUID 与已固定 UUID 不一致的版本。
     这种身份冲突只会让该版本不可行，不是错误。

包元数据目录结构:
    versions.toml       "1.2.0" = { hash-sha1 = "..." }
    requirements.toml   "1.2.0" = { Qux = "<uuid>" }
    compatibility.toml  "1.2.0" = { Qux = ">=1.0.0" }   (可选，原样透传)
"""

from __future__ import annotations

import logging
import re
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from uuid import UUID

from semantic_version import Version

from pkgresolve.core.dep.models import (
    COMPATIBILITY_FILE,
    HASH_KEY,
    REQUIREMENTS_FILE,
    VERSIONS_FILE,
    AvailableVersion,
    DependencyGraph,
)
from pkgresolve.core.dep.registry import RegistryIndexBuilder
from pkgresolve.core.dep.resolver import IdentityResolver, restrict
from pkgresolve.core.dep.versions import VersionSpec, parse_version
from pkgresolve.core.exceptions import MalformedMetadataError, ResolutionError
from pkgresolve.utils.toml_io import load_toml

logger = logging.getLogger(__name__)

_SHA1_RE = re.compile(r"^[0-9a-f]{40}$", re.IGNORECASE)


@dataclass
class CollectedGraph:
    """收集结果: 依赖图 + 全部已固定身份 + 各包元数据目录"""

    graph: DependencyGraph = field(default_factory=dict)
    uuids: dict[str, UUID] = field(default_factory=dict)
    where: dict[str, list[Path]] = field(default_factory=dict)


def read_available(path: Path) -> dict[Version, AvailableVersion]:
    """读取单个包目录下声明的全部版本（不做任何过滤）

    异常:
        MalformedMetadataError: 文件缺失、TOML 无效、版本号或哈希非法
    """
    versions = _load_table(path / VERSIONS_FILE)
    requirements = _load_table(path / REQUIREMENTS_FILE)
    try:
        compatibility = load_toml(path / COMPATIBILITY_FILE)
    except FileNotFoundError:
        compatibility = {}

    available: dict[Version, AvailableVersion] = {}
    for raw, info in versions.items():
        ver = _version(path / VERSIONS_FILE, raw)
        sha1 = info.get(HASH_KEY) if isinstance(info, dict) else None
        if not isinstance(sha1, str) or not _SHA1_RE.match(sha1):
            raise MalformedMetadataError(
                f"版本 {raw} 缺少有效的 {HASH_KEY}", path / VERSIONS_FILE,
                repr(info),
            )
        available[ver] = AvailableVersion(
            version=ver,
            hash_sha1=sha1.lower(),
            requires=_requires(path / REQUIREMENTS_FILE, raw, requirements.get(raw, {})),
            compatibility={
                str(k): str(v) for k, v in (compatibility.get(raw) or {}).items()
            },
        )
    return available


def _load_table(path: Path) -> dict[str, Any]:
    try:
        return load_toml(path)
    except FileNotFoundError as e:
        raise MalformedMetadataError("缺少包元数据文件", path) from e


def _version(path: Path, raw: str) -> Version:
    try:
        return parse_version(raw)
    except ValueError as e:
        raise MalformedMetadataError(f"非法版本号 {raw!r}", path) from e


def _requires(path: Path, raw: str, table: object) -> dict[str, UUID]:
    if not isinstance(table, dict):
        raise MalformedMetadataError(f"版本 {raw} 的依赖表无效", path, repr(table))
    try:
        return {str(dep): UUID(str(uuid)) for dep, uuid in table.items()}
    except ValueError as e:
        raise MalformedMetadataError(
            f"版本 {raw} 的依赖 UUID 非法", path, repr(table),
        ) from e


class DependencyGraphCollector:
    """依赖图收集器

    用法:
        collector = DependencyGraphCollector(builder, resolver, request)
        result = collector.collect(fixed, where)
    """

    def __init__(
        self,
        builder: RegistryIndexBuilder,
        resolver: IdentityResolver,
        request: Mapping[str, VersionSpec],
    ) -> None:
        self.builder = builder
        self.resolver = resolver
        self.request = request

    def collect(
        self,
        fixed: Mapping[str, UUID],
        where: Mapping[str, list[Path]],
    ) -> CollectedGraph:
        """从请求包名出发收集依赖图

        参数:
            fixed: 已固定的身份（请求中已解析的包 + 清单中的包）
            where: 已索引包名的元数据目录（至少覆盖请求中的包名）
        """
        uuids = dict(fixed)
        locations = {name: list(paths) for name, paths in where.items()}
        candidates = self._discover(uuids, locations)
        graph = self._filter(candidates, uuids)
        reached = {name: uuids[name] for name in graph}
        return CollectedGraph(
            graph=graph,
            uuids=reached,
            where={name: locations[name] for name in sorted(graph)},
        )

    # ------------------------------------------------------------------
    # 阶段 1: 发现
    # ------------------------------------------------------------------

    def _discover(
        self,
        uuids: dict[str, UUID],
        locations: dict[str, list[Path]],
    ) -> dict[str, dict[Version, AvailableVersion]]:
        """反复扩展工作集，直到可达包名全部读取完毕

        每一轮都从请求包名重新计算可达集合，只经由当前仍可行的版本扩展；
        新固定的身份可能让已读取的版本变得不可行，其依赖随之离开工作集。
        """
        candidates: dict[str, dict[Version, AvailableVersion]] = {}
        while True:
            reachable, hints = self._reachable(candidates, uuids)
            unread = [name for name in reachable if name not in candidates]
            if not unread:
                break
            indexed = [name for name in unread if name in locations]
            if indexed:
                for name in indexed:
                    candidates[name] = self._read_candidates(name, locations[name])
                continue
            self._index_batch(set(unread), hints, uuids, locations)

        logger.info("依赖发现完成: %d 个包", len(reachable))
        return {name: candidates[name] for name in reachable}

    def _reachable(
        self,
        candidates: Mapping[str, dict[Version, AvailableVersion]],
        uuids: Mapping[str, UUID],
    ) -> tuple[list[str], dict[str, set[UUID]]]:
        """从请求包名出发，沿可行版本的依赖边求可达包名及依赖边声明的 UUID"""
        queue: deque[str] = deque(sorted(self.request))
        visited: set[str] = set(queue)
        reachable: list[str] = []
        hints: dict[str, set[UUID]] = {}

        while queue:
            name = queue.popleft()
            reachable.append(name)
            for av in candidates.get(name, {}).values():
                if _conflict(av, uuids) is not None:
                    continue
                for dep, dep_uuid in av.requires.items():
                    hints.setdefault(dep, set()).add(dep_uuid)
                    if dep not in visited:
                        visited.add(dep)
                        queue.append(dep)
        return reachable, hints

    def _index_batch(
        self,
        names: set[str],
        hints: Mapping[str, set[UUID]],
        uuids: dict[str, UUID],
        locations: dict[str, list[Path]],
    ) -> None:
        """为新发现的包名建索引并固定身份

        能解析的包名先固定，解析失败的推迟到下一轮重试:
        新固定的身份可能让引入它们的版本全部不可行。
        一个都解析不了时整批报错。
        """
        logger.debug("传递发现新包名: %s", ", ".join(sorted(names)))
        index = self.builder.find_registered(names)
        resolved: dict[str, UUID] = {}
        deferred: list[str] = []
        for name in sorted(names):
            try:
                resolved.update(self.resolver.resolve([name], index, hints))
            except ResolutionError:
                deferred.append(name)
        if not resolved:
            self.resolver.resolve(names, index, hints)
        if deferred:
            logger.debug("暂缓解析: %s", ", ".join(deferred))
        uuids.update(resolved)
        locations.update(restrict(index, resolved))

    def _read_candidates(
        self, name: str, paths: list[Path],
    ) -> dict[Version, AvailableVersion]:
        """合并各位置的版本（第一个位置优先），只保留满足请求约束的版本"""
        spec = self.request.get(name) or VersionSpec.any()
        merged: dict[Version, AvailableVersion] = {}
        for path in paths:
            available = read_available(path)
            for ver in spec.filter(available):
                merged.setdefault(ver, available[ver])
        logger.debug(
            "%s: %d 个候选版本 (约束 %s)", name, len(merged), spec,
            extra={"package": name},
        )
        return merged

    # ------------------------------------------------------------------
    # 阶段 2: 身份冲突过滤
    # ------------------------------------------------------------------

    def _filter(
        self,
        candidates: Mapping[str, dict[Version, AvailableVersion]],
        uuids: Mapping[str, UUID],
    ) -> DependencyGraph:
        graph: DependencyGraph = {}
        for name in sorted(candidates):
            kept: dict[Version, AvailableVersion] = {}
            for ver in sorted(candidates[name]):
                av = candidates[name][ver]
                conflict = _conflict(av, uuids)
                if conflict is not None:
                    logger.debug(
                        "剔除 %s@%s: 依赖 %s 的 UUID %s 与已固定的 %s 冲突",
                        name, ver, conflict, av.requires[conflict],
                        uuids[conflict],
                        extra={"package": name, "uuid": uuids.get(name)},
                    )
                    continue
                kept[ver] = av
            graph[name] = kept
        return graph


def _conflict(av: AvailableVersion, uuids: Mapping[str, UUID]) -> str | None:
    """返回第一个与已固定身份冲突的依赖名；尚未固定的依赖不算冲突"""
    return next(
        (d for d, u in sorted(av.requires.items()) if d in uuids and uuids[d] != u),
        None,
    )
