"""pkgresolve 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
全局选项（配置文件、depot、环境、清单）在 main 中汇总到 ctx.obj。
"""

from typing import Any

import click

from pkgresolve import __version__
from pkgresolve.core.config import init_config
from pkgresolve.core.resolution import ResolutionManager
from pkgresolve.utils.logger import setup_from_env


def _manager(ctx: click.Context) -> ResolutionManager:
    """按全局选项构造解析管理器"""
    obj: dict[str, Any] = ctx.find_root().obj or {}
    return ResolutionManager(
        depots=list(obj.get("depots") or []) or None,
        environment=obj.get("environment", ""),
        manifest_path=obj.get("manifest", ""),
        config=obj.get("config"),
    )


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default="configs/default.yml", help="配置文件路径")
@click.option("--depot", "-d", multiple=True, help="depot 目录（可多次指定，覆盖配置）")
@click.option("--env", "-e", "environment", default="", help="环境名")
@click.option("--manifest", default="", help="显式指定清单文件")
@click.pass_context
def main(
    ctx: click.Context, config_path: str, depot: tuple[str, ...],
    environment: str, manifest: str,
) -> None:
    """pkgresolve - 包管理器依赖解析核心"""
    cfg = init_config(config_path)
    setup_from_env(cfg.log_level)
    ctx.obj = {
        "config": cfg,
        "depots": depot,
        "environment": environment,
        "manifest": manifest,
    }


# 注册各领域子命令
from pkgresolve.cli.cmd_deps import register as _reg_deps  # noqa: E402

_reg_deps(main)
