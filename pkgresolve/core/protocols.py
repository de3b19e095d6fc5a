"""领域协议定义

版本约束求解器不属于本项目，这里只定义它的调用边界。
使用 typing.Protocol 而非 ABC，外部求解器无需继承即可满足协议。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol
from uuid import UUID

from semantic_version import Version

from pkgresolve.core.dep.models import DependencyGraph
from pkgresolve.core.dep.versions import VersionSpec


class Solver(Protocol):
    """版本约束求解器协议"""

    def resolve(
        self,
        requirements: Mapping[str, VersionSpec],
        graph: DependencyGraph,
    ) -> dict[UUID, Version]:
        """从依赖图中为每个包挑选一个版本，返回 UUID -> 选中版本"""
        ...
