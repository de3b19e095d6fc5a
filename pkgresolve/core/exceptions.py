"""统一异常体系

所有业务异常继承 PkgResolveError，每个异常带稳定的 code，
CLI 层据此输出友好提示。

请求级错误（NotFound / Ambiguous / Inconsistent）继承 ResolutionError；
注册表损坏（MalformedMetadataError）单独一支，不属于用户输入问题。
身份冲突（某版本依赖的 UUID 与已固定的 UUID 不一致）不是异常，
由图收集器直接剔除该版本。
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from pkgresolve.core.dep.models import Ambiguity


class PkgResolveError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(PkgResolveError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(PkgResolveError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class ResolutionError(PkgResolveError):
    """当前解析请求无法继续（需要调用方处理）"""

    code = "RESOLUTION_ERROR"


class NotFoundError(ResolutionError):
    """请求的包名不在任何注册表中"""

    code = "NOT_FOUND"

    def __init__(self, names: list[str]) -> None:
        self.names = sorted(names)
        super().__init__(
            f"以下包不在任何已配置的注册表中: {', '.join(self.names)}"
        )


class AmbiguousError(ResolutionError):
    """包名对应多个 UUID，且没有清单记录可以裁决

    携带全部歧义项，便于调用方一次性展示或让用户选择。
    """

    code = "AMBIGUOUS"

    def __init__(self, ambiguities: list[Ambiguity]) -> None:
        self.ambiguities = ambiguities
        lines = []
        for amb in ambiguities:
            lines.append(f"{amb.name} 存在歧义，可能指向:")
            for i, (uuid, descriptor) in enumerate(amb.candidates, start=1):
                suffix = f" - {descriptor}" if descriptor else ""
                lines.append(f" [{i}] {uuid}{suffix}")
        lines.append("暂不支持交互式选择，请显式指定包")
        super().__init__("\n".join(lines))


class InconsistentError(ResolutionError):
    """清单中已安装的 UUID 在所有注册表中都找不到"""

    code = "INCONSISTENT"

    def __init__(self, name: str, uuid: UUID) -> None:
        self.name = name
        self.uuid = uuid
        super().__init__(
            f"{name}/{uuid} 存在于清单中但不在任何注册表中；"
            f"如需安装其他 {name}，请先移除 {name} 再重新添加"
        )


class MalformedMetadataError(PkgResolveError):
    """注册表元数据格式错误（注册表损坏，而非用户错误）"""

    code = "MALFORMED_METADATA"

    def __init__(
        self, message: str, path: Path | str = "", content: str = "",
    ) -> None:
        self.path = str(path)
        self.content = content
        detail = f"{message}: {self.path}" if self.path else message
        if content:
            detail = f"{detail}\n  {content}"
        super().__init__(detail)
