"""集中配置管理

仓库位置（depots）、环境名、清单路径等全局设置统一从这里取，
核心类只接收显式参数，不读取环境变量或全局状态。
支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from pkgresolve.core.exceptions import ConfigError
from pkgresolve.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_DEPOT = "~/.pkgresolve"


@dataclass
class Config:
    """全局配置"""

    # 仓库根目录列表，按优先级排列；每个目录下有 registries/ 与 environments/
    depots: list[str] = field(default_factory=lambda: [DEFAULT_DEPOT])
    # 环境名，对应 <depot>/environments/<environment>/
    environment: str = "default"
    # 显式指定清单文件，非空时跳过环境查找
    manifest: str = ""

    log_level: str = "INFO"

    # 放不到字段里的配置项
    extra: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.depots, str):
            self.depots = [self.depots]
        if not isinstance(self.depots, list) or not all(
            isinstance(d, str) and d for d in self.depots
        ):
            raise ConfigError(f"depots 必须是非空路径字符串列表: {self.depots!r}")

    @classmethod
    def from_file(cls, path: str = "configs/default.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known and k != "extra"}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def depot_paths(self) -> list[Path]:
        """展开 ~ 并转为绝对路径"""
        return [Path(d).expanduser().resolve() for d in self.depots]

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "configs/default.yml") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
