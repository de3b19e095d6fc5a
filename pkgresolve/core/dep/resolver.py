"""包身份解析器

把人类可读的包名映射为全局唯一的 UUID:

  1. 清单已记录该包 → 以清单 UUID 为准，注册表中必须还能找到它
  2. 注册表中只有一个 UUID → 直接采用
  3. 依赖边声明的 UUID 恰好命中一个候选 → 采用（仅用于传递发现的包名）
  4. 多个 UUID → 记为歧义，全部收集后统一报错，绝不自动挑选
  5. 没有 UUID → NotFound
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from uuid import UUID

from pkgresolve.core.dep.models import Ambiguity, ManifestEntry, RegistryIndex
from pkgresolve.core.dep.registry import read_descriptor
from pkgresolve.core.exceptions import (
    AmbiguousError,
    InconsistentError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


class IdentityResolver:
    """包名 → UUID 解析，清单优先"""

    def __init__(self, manifest: Mapping[str, ManifestEntry]) -> None:
        self.manifest = manifest

    def pinned(self) -> dict[str, UUID]:
        """清单中已固定的全部身份"""
        return {name: entry.uuid for name, entry in self.manifest.items()}

    def resolve(
        self,
        names: Iterable[str],
        index: RegistryIndex,
        hints: Mapping[str, set[UUID]] | None = None,
    ) -> dict[str, UUID]:
        """解析一批包名

        参数:
            names: 待解析的包名
            index: RegistryIndexBuilder.find_registered() 的结果
            hints: 包名 -> 依赖边上声明过的 UUID，用于传递依赖的消歧

        异常:
            InconsistentError: 清单中的 UUID 已不在任何注册表中
            NotFoundError: 有包名不在任何注册表中（一次列出全部）
            AmbiguousError: 有包名对应多个 UUID（一次列出全部）
        """
        hints = hints or {}
        uuids: dict[str, UUID] = {}
        missing: list[str] = []
        ambiguities: list[Ambiguity] = []

        for name in sorted(set(names)):
            candidates = index.get(name, {})
            entry = self.manifest.get(name)
            if entry is not None:
                if not candidates.get(entry.uuid):
                    raise InconsistentError(name, entry.uuid)
                uuids[name] = entry.uuid
                continue

            if not candidates:
                missing.append(name)
            elif len(candidates) == 1:
                uuids[name] = next(iter(candidates))
            else:
                declared = hints.get(name, set()) & candidates.keys()
                if len(declared) == 1:
                    uuids[name] = declared.pop()
                    logger.debug("%s 由依赖声明消歧为 %s", name, uuids[name])
                else:
                    ambiguities.append(_ambiguity(name, candidates))

        if missing:
            raise NotFoundError(missing)
        if ambiguities:
            for amb in ambiguities:
                logger.info(
                    "%s 存在歧义: %s", amb.name,
                    ", ".join(str(u) for u in sorted(amb.uuids)),
                )
            raise AmbiguousError(ambiguities)
        return uuids


def _ambiguity(name: str, candidates: Mapping[UUID, list[Path]]) -> Ambiguity:
    # 只读第一个位置的 package.toml，且推迟到真正展示时
    def describe(uuid: UUID) -> str:
        paths = candidates.get(uuid) or []
        return read_descriptor(paths[0]) if paths else ""

    return Ambiguity(name=name, uuids=sorted(candidates), describe=describe)


def restrict(index: RegistryIndex, uuids: Mapping[str, UUID]) -> dict[str, list[Path]]:
    """把索引收窄到已固定的身份: 包名 -> 该 UUID 的元数据目录"""
    return {
        name: list(index[name][uuid])
        for name, uuid in sorted(uuids.items())
        if uuid in index.get(name, {})
    }
