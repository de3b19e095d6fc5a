"""pkgresolve 日志配置

库代码只使用 logging.getLogger(__name__)，不自行配置 handler；
CLI 入口调用 setup_from_env() 统一初始化，日志输出到 stderr，stdout 留给命令结果。

解析过程中的日志可通过 extra 携带包上下文:
    logger.debug("...", name, extra={"package": name})
JSON 格式下这些字段会单独输出，便于在 CI 中按包过滤。
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

LOG_LEVEL_ENV = "PKGRESOLVE_LOG_LEVEL"
LOG_JSON_ENV = "PKGRESOLVE_LOG_JSON"

# 通过 extra 传入、需要在 JSON 中单独输出的上下文字段
CONTEXT_FIELDS = ("package", "uuid", "registry")

_TEXT_FMT = "%(asctime)s [%(levelname)-7s] %(message)s"
_DEBUG_FMT = "%(asctime)s [%(levelname)-7s] %(name)s:%(lineno)d: %(message)s"


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器

    输出格式:
        {
            "timestamp": "2024-01-01T12:00:00+00:00",
            "level": "DEBUG",
            "logger": "pkgresolve.core.dep.collector",
            "message": "Baz: 2 个候选版本 (约束 *)",
            "package": "Baz",               (仅在 extra 提供时)
            "exception": "traceback..."     (仅在有异常时)
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = str(value)
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器

    参数:
        level: 日志级别字符串，无法识别时退回 INFO
        json_output: 为 True 时输出 JSON 行；否则输出文本，DEBUG 级别附带模块和行号
    """
    reset_logging()
    root = logging.getLogger()
    numeric = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric)

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(_DEBUG_FMT if numeric <= logging.DEBUG else _TEXT_FMT)
        )
    root.addHandler(handler)


def setup_from_env(default_level: str = "INFO") -> None:
    """按环境变量配置日志，未设置时使用 default_level（通常来自配置文件）"""
    setup_logging(
        level=os.getenv(LOG_LEVEL_ENV) or default_level,
        json_output=os.getenv(LOG_JSON_ENV, "") == "1",
    )


def reset_logging() -> None:
    """清理根日志器上所有已注册的 handlers，常用于测试环境"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
