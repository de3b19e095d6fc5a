"""版本号与版本约束

基于 semantic_version：
- 版本号: semantic_version.Version，注册表中的 "1.2" 这类短写法宽松补全为 1.2.0
- 约束:   精确版本，或 SimpleSpec 区间（">=1.0.0,<2.0.0"、"^1.2"、"~1.4"）
"""

from __future__ import annotations

import re
from collections.abc import Iterable

import semantic_version
from semantic_version import Version

from pkgresolve.core.exceptions import ValidationError

_SHORT_VERSION_RE = re.compile(r"^v?\d+(\.\d+){0,2}$")
_ANY = ("", "*")


def parse_version(text: str) -> Version:
    """解析版本号，支持短写法（"1" → 1.0.0, "1.2" → 1.2.0）

    异常:
        ValueError: 无法识别的版本号
    """
    text = str(text).strip()
    try:
        return Version(text)
    except ValueError:
        if not _SHORT_VERSION_RE.match(text):
            raise
    return Version.coerce(text.lstrip("v"))


class VersionSpec:
    """版本约束：精确版本或区间谓词

    用法:
        >>> Version("1.2.0") in VersionSpec(">=1.0.0,<2.0.0")
        True
        >>> VersionSpec("1.0").exact
        Version('1.0.0')
    """

    def __init__(self, raw: str = "*") -> None:
        self.raw = raw.strip()
        self.exact: Version | None = None
        self._range: semantic_version.SimpleSpec | None = None

        if self.raw in _ANY:
            return
        if _SHORT_VERSION_RE.match(self.raw) or _is_strict_version(self.raw):
            self.exact = parse_version(self.raw)
            return
        try:
            self._range = semantic_version.SimpleSpec(
                ",".join(part.strip() for part in self.raw.split(",")),
            )
        except ValueError as e:
            raise ValidationError(
                f"无法解析版本约束: {self.raw!r}", details=[str(e)],
            ) from e

    @classmethod
    def any(cls) -> VersionSpec:
        return cls("*")

    @property
    def is_any(self) -> bool:
        return self.exact is None and self._range is None

    def __contains__(self, version: Version) -> bool:
        if self.exact is not None:
            return version == self.exact
        if self._range is not None:
            return self._range.match(version)
        return True

    def filter(self, versions: Iterable[Version]) -> list[Version]:
        """返回满足约束的版本（升序）"""
        return sorted(v for v in versions if v in self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionSpec):
            return NotImplemented
        return (self.exact, self._range) == (other.exact, other._range)

    def __hash__(self) -> int:
        return hash((self.exact, str(self._range)))

    def __str__(self) -> str:
        if self.exact is not None:
            return str(self.exact)
        return self.raw or "*"

    def __repr__(self) -> str:
        return f"VersionSpec({str(self)!r})"


def _is_strict_version(text: str) -> bool:
    try:
        Version(text)
    except ValueError:
        return False
    return True


def parse_request(tokens: Iterable[str]) -> dict[str, VersionSpec]:
    """解析命令行包参数: "Foo"、"Foo@1.2.0"、"Foo@>=1.0,<2.0"

    同一个包出现多次时后者覆盖前者。
    """
    request: dict[str, VersionSpec] = {}
    for token in tokens:
        name, _, spec = token.strip().partition("@")
        name = name.strip()
        if not name:
            raise ValidationError(f"缺少包名: {token!r}")
        request[name] = VersionSpec(spec) if spec.strip() else VersionSpec.any()
    return request
