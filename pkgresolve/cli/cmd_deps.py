"""CLI — 依赖解析命令"""

from __future__ import annotations

import json
from collections.abc import Callable
from functools import wraps
from typing import Any

import click

from pkgresolve.cli import _manager
from pkgresolve.core.dep.versions import parse_request
from pkgresolve.core.exceptions import (
    AmbiguousError,
    PkgResolveError,
    ValidationError,
)


def register(group: click.Group) -> None:
    group.add_command(where)
    group.add_command(installed)
    group.add_command(add)


def _friendly_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """把库异常转为带错误码的 ClickException（退出码 1）"""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except AmbiguousError as e:
            raise click.ClickException(f"[{e.code}]\n{e}") from e
        except ValidationError as e:
            lines = [f"[{e.code}] {e}", *(f"  - {d}" for d in e.details)]
            raise click.ClickException("\n".join(lines)) from e
        except PkgResolveError as e:
            raise click.ClickException(f"[{e.code}] {e}") from e

    return wrapper


@click.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
@_friendly_errors
def where(ctx: click.Context, names: tuple[str, ...]) -> None:
    """查询包名在各注册表中的 UUID 与元数据目录"""
    index = _manager(ctx).where(list(names))
    for name in names:
        if name not in index:
            click.echo(f"  {name}: 未找到")
            continue
        for uuid, paths in sorted(index[name].items()):
            click.echo(f"  {name:20s} {uuid}")
            for p in paths:
                click.echo(f"    {p}")


@click.command()
@click.pass_context
@_friendly_errors
def installed(ctx: click.Context) -> None:
    """列出当前环境清单中已安装的包"""
    rm = _manager(ctx)
    manifest = rm.load_manifest()
    if not manifest:
        click.echo(f"清单为空: {rm.find_manifest()}")
        return
    for name, entry in sorted(manifest.items()):
        ver = str(entry.version) if entry.version else "-"
        click.echo(f"  {name:20s} {ver:12s} {entry.uuid}")
        if entry.deps:
            click.echo(f"    依赖: {', '.join(entry.deps)}")


@click.command()
@click.argument("packages", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="以 JSON 输出完整解析结果")
@click.pass_context
@_friendly_errors
def add(ctx: click.Context, packages: tuple[str, ...], as_json: bool) -> None:
    """解析待添加的包（NAME 或 NAME@SPEC），输出求解器输入"""
    request = parse_request(packages)
    res = _manager(ctx).add(request)
    if as_json:
        click.echo(json.dumps(res.to_dict(), indent=2, ensure_ascii=False))
        return

    for name, uuid in sorted(res.uuids.items()):
        if name not in res.graph:
            continue
        vers = sorted(res.graph[name])
        spec = res.requirements.get(name)
        marker = ""
        if spec is not None:
            marker = " [请求]" if spec.is_any else f" [请求 {spec}]"
        listed = ", ".join(str(v) for v in vers) or "(无可行版本)"
        click.echo(f"  {name:20s} {uuid}{marker}")
        click.echo(f"    {listed}")
