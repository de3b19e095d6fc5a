"""依赖解析核心

模块划分:
- registry.py:   注册表发现与索引构建
- manifest.py:   安装清单定位与读取
- resolver.py:   包名 → UUID 解析与歧义收集
- collector.py:  依赖图收集（传递发现 + 身份冲突过滤）
- candidates.py: 求解器候选表投影
- versions.py:   版本号与版本约束
- models.py:     数据模型
"""

from pkgresolve.core.dep.candidates import candidate_versions
from pkgresolve.core.dep.collector import CollectedGraph, DependencyGraphCollector
from pkgresolve.core.dep.manifest import find_manifest, load_manifest
from pkgresolve.core.dep.models import (
    Ambiguity,
    AvailableVersion,
    ManifestEntry,
    Resolution,
)
from pkgresolve.core.dep.registry import RegistryIndexBuilder
from pkgresolve.core.dep.resolver import IdentityResolver
from pkgresolve.core.dep.versions import VersionSpec, parse_request, parse_version

__all__ = [
    "Ambiguity",
    "AvailableVersion",
    "CollectedGraph",
    "DependencyGraphCollector",
    "IdentityResolver",
    "ManifestEntry",
    "RegistryIndexBuilder",
    "Resolution",
    "VersionSpec",
    "candidate_versions",
    "find_manifest",
    "load_manifest",
    "parse_request",
    "parse_version",
]
