"""求解器候选表

把依赖图投影为求解器需要的最小结构: UUID -> 版本 -> 内容哈希。
纯投影，不做新的过滤。
"""

from __future__ import annotations

from collections.abc import Mapping
from uuid import UUID

from semantic_version import Version

from pkgresolve.core.dep.models import DependencyGraph


def candidate_versions(
    graph: DependencyGraph, uuids: Mapping[str, UUID],
) -> dict[UUID, dict[Version, str]]:
    """按包名对应的 UUID 汇总图中保留的版本及其哈希"""
    versions: dict[UUID, dict[Version, str]] = {}
    for name in sorted(graph):
        table = versions.setdefault(uuids[name], {})
        for ver in sorted(graph[name]):
            table[ver] = graph[name][ver].hash_sha1
    return versions
