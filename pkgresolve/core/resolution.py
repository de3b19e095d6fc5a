"""依赖解析管理器

把一次 "add" 解析串起来，产出交给求解器的全部输入:

  1. 为请求的包名建索引，加载清单，固定身份（歧义 / 缺失 / 不一致即失败）
  2. 对照清单整理顶层约束: 已安装版本满足约束的请求不再交给求解器，
     否则以请求为准（已安装版本被取代，身份仍然固定）
  3. 收集依赖图（传递发现 + 身份冲突过滤）
  4. 投影出 UUID -> 版本 -> 哈希 的候选表

用法:
    from pkgresolve.core.resolution import ResolutionManager

    rm = ResolutionManager()
    res = rm.add({"Foo": VersionSpec(">=1.0.0,<2.0.0")})
    res.versions        # 候选表
    rm.solve(res, solver)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from uuid import UUID

from semantic_version import Version

from pkgresolve.core.config import Config, get_config
from pkgresolve.core.dep.candidates import candidate_versions
from pkgresolve.core.dep.collector import DependencyGraphCollector
from pkgresolve.core.dep.manifest import find_manifest, load_manifest
from pkgresolve.core.dep.models import ManifestEntry, RegistryIndex, Resolution
from pkgresolve.core.dep.registry import RegistryIndexBuilder
from pkgresolve.core.dep.resolver import IdentityResolver, restrict
from pkgresolve.core.dep.versions import VersionSpec
from pkgresolve.core.exceptions import ValidationError
from pkgresolve.core.protocols import Solver

logger = logging.getLogger(__name__)


class ResolutionManager:
    """依赖解析统一入口

    depots / manifest_path 可显式传入；未传入时取全局 Config。
    每次 add() 都重新读取注册表与清单，不做跨调用缓存。
    """

    def __init__(
        self,
        depots: list[Path | str] | None = None,
        environment: str = "",
        manifest_path: str = "",
        config: Config | None = None,
    ) -> None:
        cfg = config or get_config()
        self.depots = [Path(d) for d in depots] if depots else cfg.depot_paths()
        self.environment = environment or cfg.environment
        self.manifest_path = manifest_path or cfg.manifest
        self.builder = RegistryIndexBuilder(self.depots)

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def find_manifest(self) -> Path:
        return find_manifest(self.depots, self.environment, self.manifest_path)

    def load_manifest(self) -> dict[str, ManifestEntry]:
        return load_manifest(self.find_manifest())

    def where(self, names: list[str]) -> RegistryIndex:
        """查询包名在各注册表中的 UUID 与位置（不做消歧）"""
        return self.builder.find_registered(names)

    # ------------------------------------------------------------------
    # 解析
    # ------------------------------------------------------------------

    def add(self, request: Mapping[str, VersionSpec]) -> Resolution:
        """为一组请求的包构建求解器输入"""
        if not request:
            raise ValidationError("至少需要指定一个包")

        names = sorted(request)
        logger.info("解析请求: %s", ", ".join(names))
        index = self.builder.find_registered(names)
        manifest = self.load_manifest()
        resolver = IdentityResolver(manifest)
        resolved = resolver.resolve(names, index)

        fixed = {**resolver.pinned(), **resolved}
        requirements = reconcile(request, manifest)

        collector = DependencyGraphCollector(self.builder, resolver, request)
        collected = collector.collect(fixed, restrict(index, resolved))

        uuids = {**fixed, **collected.uuids}
        versions = candidate_versions(collected.graph, collected.uuids)
        logger.info(
            "解析完成: %d 个包, %d 个候选版本",
            len(collected.graph), sum(len(v) for v in versions.values()),
        )
        return Resolution(
            uuids=dict(sorted(uuids.items())),
            where=collected.where,
            graph=collected.graph,
            versions=versions,
            requirements=requirements,
        )

    def solve(self, resolution: Resolution, solver: Solver) -> dict[UUID, Version]:
        """把解析结果交给外部求解器"""
        return solver.resolve(resolution.requirements, resolution.graph)


def reconcile(
    request: Mapping[str, VersionSpec],
    manifest: Mapping[str, ManifestEntry],
) -> dict[str, VersionSpec]:
    """对照清单整理顶层约束

    已安装且版本满足约束的包不再交给求解器；
    其余请求原样保留（已安装版本将被取代）。
    """
    requirements: dict[str, VersionSpec] = {}
    for name in sorted(request):
        spec = request[name]
        entry = manifest.get(name)
        if entry is not None and entry.version is not None and entry.version in spec:
            logger.info(
                "%s@%s 已安装且满足 %s，跳过", name, entry.version, spec,
                extra={"package": name, "uuid": entry.uuid},
            )
            continue
        if entry is not None:
            logger.info(
                "%s 已安装版本 %s 将被取代 (请求 %s)", name, entry.version, spec,
                extra={"package": name, "uuid": entry.uuid},
            )
        requirements[name] = spec
    return requirements
