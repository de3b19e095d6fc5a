"""YAML 配置文件读取

只用于工具自身的配置（configs/*.yml）；注册表与清单是 TOML，见 toml_io。
配置文件有问题时统一抛 ConfigError，由 CLI 转成带错误码的提示。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from pkgresolve.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# 配置文件不会很大，超过 1MB 视为误指向了其他文件
MAX_YAML_SIZE = 1024 * 1024


def load_yaml(path: str | Path) -> dict[str, Any]:
    """读取 YAML 配置文件

    返回:
        顶层映射；文件不存在或内容为空时返回空字典

    异常:
        ConfigError: 文件过大、YAML 语法错误、顶层不是映射
    """
    p = Path(path)
    if not p.is_file():
        logger.debug("配置文件不存在，使用默认配置: %s", p)
        return {}

    size = p.stat().st_size
    if size > MAX_YAML_SIZE:
        raise ConfigError(f"配置文件过大: {p} ({size} 字节)")

    try:
        with open(p, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"配置文件 YAML 语法错误: {p} ({e})") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"配置文件顶层必须是映射: {p} (实际类型: {type(data).__name__})"
        )
    return data
