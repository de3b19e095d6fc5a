"""TOML 文件读取工具

注册表、包元数据、安装清单均为 TOML 格式。
语法解析交给标准库 tomllib，这里只统一编码、大小限制与错误类型：
解析失败一律转换为 MalformedMetadataError 并带上文件路径。
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pkgresolve.core.exceptions import MalformedMetadataError

logger = logging.getLogger(__name__)

# 单个元数据文件最大 50MB（大型注册表的 packages.toml 也远低于此值）
MAX_TOML_SIZE = 50 * 1024 * 1024


def load_toml(path: str | Path) -> dict[str, Any]:
    """读取并解析 TOML 文件

    参数:
        path: TOML 文件路径

    返回:
        dict: 解析后的顶层表

    异常:
        FileNotFoundError: 文件不存在（由调用方决定是否视为格式错误）
        MalformedMetadataError: 文件过大或 TOML 语法错误
        OSError: 其他 IO 错误
    """
    p = Path(path)
    file_size = p.stat().st_size
    if file_size > MAX_TOML_SIZE:
        raise MalformedMetadataError(
            f"TOML 文件过大 ({file_size} 字节, 限制 {MAX_TOML_SIZE})", p,
        )

    with open(p, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            logger.error("解析 TOML 文件失败: %s, 错误: %s", p, e)
            raise MalformedMetadataError(f"TOML 语法错误 ({e})", p) from e
