"""包身份解析单元测试"""

from __future__ import annotations

from pathlib import Path
from uuid import UUID

import pytest

from pkgresolve.core.dep.models import ManifestEntry
from pkgresolve.core.dep.resolver import IdentityResolver, restrict
from pkgresolve.core.exceptions import (
    AmbiguousError,
    InconsistentError,
    NotFoundError,
)

A = UUID("00000000-0000-4000-8000-00000000000a")
B = UUID("00000000-0000-4000-8000-00000000000b")
C = UUID("00000000-0000-4000-8000-00000000000c")


def _index(**names: dict[UUID, list[Path]]) -> dict:
    return dict(names)


class TestResolve:
    def test_single_identity_adopted(self) -> None:
        index = _index(Foo={A: [Path("/r/Foo")]})
        assert IdentityResolver({}).resolve(["Foo"], index) == {"Foo": A}

    def test_manifest_identity_wins(self) -> None:
        """清单记录的 UUID 优先于注册表中的其他同名包"""
        index = _index(Foo={A: [Path("/r1/Foo")], B: [Path("/r2/Foo")], C: [Path("/r3/Foo")]})
        manifest = {"Foo": ManifestEntry(name="Foo", uuid=B)}
        assert IdentityResolver(manifest).resolve(["Foo"], index) == {"Foo": B}

    def test_manifest_identity_missing_from_registries(self) -> None:
        index = _index(Foo={A: [Path("/r1/Foo")]})
        manifest = {"Foo": ManifestEntry(name="Foo", uuid=B)}
        with pytest.raises(InconsistentError) as exc:
            IdentityResolver(manifest).resolve(["Foo"], index)
        assert exc.value.name == "Foo"
        assert exc.value.uuid == B

    def test_ambiguity_lists_all_candidates(self) -> None:
        index = _index(Bar={B: [Path("/r2/Bar")], A: [Path("/r1/Bar")]})
        with pytest.raises(AmbiguousError) as exc:
            IdentityResolver({}).resolve(["Bar"], index)
        (amb,) = exc.value.ambiguities
        assert amb.name == "Bar"
        assert [u for u, _ in amb.candidates] == [A, B]

    def test_all_ambiguities_collected(self) -> None:
        index = _index(
            Bar={A: [Path("/r1/Bar")], B: [Path("/r2/Bar")]},
            Baz={A: [Path("/r1/Baz")], C: [Path("/r3/Baz")]},
            Foo={A: [Path("/r1/Foo")]},
        )
        with pytest.raises(AmbiguousError) as exc:
            IdentityResolver({}).resolve(["Bar", "Baz", "Foo"], index)
        assert [a.name for a in exc.value.ambiguities] == ["Bar", "Baz"]

    def test_descriptor_read_lazily(self, depot) -> None:
        reg1, reg2 = depot.registry("R1"), depot.registry("R2")
        p1 = reg1.package("Bar", A, {"1.0.0": {}}, repo="https://a.example/Bar.git")
        p2 = reg2.package("Bar", B, {"1.0.0": {}}, repo="https://b.example/Bar.git")
        index = _index(Bar={A: [p1], B: [p2]})
        with pytest.raises(AmbiguousError) as exc:
            IdentityResolver({}).resolve(["Bar"], index)
        assert exc.value.ambiguities[0].candidates == [
            (A, "https://a.example/Bar.git"),
            (B, "https://b.example/Bar.git"),
        ]
        assert "https://a.example/Bar.git" in str(exc.value)

    def test_not_found(self) -> None:
        with pytest.raises(NotFoundError) as exc:
            IdentityResolver({}).resolve(["Nope", "Gone"], {})
        assert exc.value.names == ["Gone", "Nope"]

    def test_hint_disambiguates(self) -> None:
        """依赖边声明的 UUID 唯一命中候选时采用"""
        index = _index(Qux={A: [Path("/r1/Qux")], B: [Path("/r2/Qux")]})
        resolved = IdentityResolver({}).resolve(["Qux"], index, {"Qux": {B}})
        assert resolved == {"Qux": B}

    def test_conflicting_hints_stay_ambiguous(self) -> None:
        index = _index(Qux={A: [Path("/r1/Qux")], B: [Path("/r2/Qux")]})
        with pytest.raises(AmbiguousError):
            IdentityResolver({}).resolve(["Qux"], index, {"Qux": {A, B}})


class TestRestrict:
    def test_narrow_to_fixed_identity(self) -> None:
        index = _index(Foo={A: [Path("/r1/Foo")], B: [Path("/r2/Foo"), Path("/r3/Foo")]})
        assert restrict(index, {"Foo": B}) == {"Foo": [Path("/r2/Foo"), Path("/r3/Foo")]}

    def test_unindexed_names_skipped(self) -> None:
        assert restrict({}, {"Foo": A}) == {}
