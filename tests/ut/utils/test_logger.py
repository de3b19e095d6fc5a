"""日志配置单元测试"""

from __future__ import annotations

import json
import logging
import sys

import pytest

from pkgresolve.utils.logger import (
    LOG_JSON_ENV,
    LOG_LEVEL_ENV,
    JSONFormatter,
    setup_from_env,
    setup_logging,
)


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        "pkgresolve.test", logging.INFO, __file__, 10, "索引 %d 个包", (3,), None,
    )
    record.__dict__.update(extra)
    return record


class TestJSONFormatter:
    def test_basic_fields(self) -> None:
        entry = json.loads(JSONFormatter().format(_record()))
        assert entry["message"] == "索引 3 个包"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "pkgresolve.test"
        assert "package" not in entry

    def test_context_fields(self) -> None:
        entry = json.loads(JSONFormatter().format(_record(package="Baz", registry="/r/General")))
        assert entry["package"] == "Baz"
        assert entry["registry"] == "/r/General"

    def test_exception(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()
        entry = json.loads(JSONFormatter().format(record))
        assert "boom" in entry["exception"]


class TestSetup:
    def test_replaces_handlers(self) -> None:
        setup_logging("DEBUG")
        setup_logging("WARNING", json_output=True)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert root.level == logging.WARNING

    def test_unknown_level_falls_back(self) -> None:
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.INFO

    def test_env_overrides_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV, "ERROR")
        monkeypatch.setenv(LOG_JSON_ENV, "1")
        setup_from_env("DEBUG")
        root = logging.getLogger()
        assert root.level == logging.ERROR
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_default_when_env_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        monkeypatch.delenv(LOG_JSON_ENV, raising=False)
        setup_from_env("DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert not isinstance(root.handlers[0].formatter, JSONFormatter)
