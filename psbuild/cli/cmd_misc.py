"""CLI — 杂项命令（平台信息、工具链检查、配置查看）"""

from __future__ import annotations

import click

from psbuild.cli import _svc
from psbuild.core.toolchain import all_requirements, require_tools
from psbuild.utils.yaml_io import dump_config


def register(group: click.Group) -> None:
    group.add_command(platform_info)
    group.add_command(check)
    group.add_command(show_config)


@click.command(name="platform")
def platform_info() -> None:
    """显示探测到的平台"""
    p = _svc().platform
    click.echo(f"平台: {p.family.value}")
    for key, value in p.to_dict().items():
        if key != "family":
            click.echo(f"  {key:11s} {value}")


@click.command()
def check() -> None:
    """按流水线顺序校验当前平台的完整工具链"""
    svc = _svc()
    tools = all_requirements(svc.platform)
    require_tools(tools, which=svc.which)
    click.echo(f"工具链完整: {', '.join(t.name for t in tools)}")


@click.command(name="config")
def show_config() -> None:
    """显示当前生效的配置"""
    click.echo(dump_config(_svc().config.to_dict()), nl=False)
