"""CLI — 开发版启动命令"""

from __future__ import annotations

import click

from psbuild.cli import _svc
from psbuild.core.models import DevLaunchOptions


def register(group: click.Group) -> None:
    group.add_command(dev)


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("arguments", nargs=-1, type=click.UNPROCESSED)
@click.option("--load-profile", is_flag=True, help="加载用户 profile（默认追加 -noprofile）")
@click.option("--zap-disable", is_flag=True, help="禁用 JIT 预编译镜像 (COMPLUS_ZapDisable=1)")
@click.option("--bin-dir", default="", help="二进制目录（默认取配置 output_dir）")
@click.option("--no-new-window", is_flag=True, help="在当前终端前台运行并等待退出")
def dev(
    arguments: tuple[str, ...], load_profile: bool, zap_disable: bool,
    bin_dir: str, no_new_window: bool,
) -> None:
    """以开发模式启动本地构建的宿主程序"""
    proc = _svc().dev.launch(DevLaunchOptions(
        arguments=list(arguments), load_profile=load_profile,
        zap_disable=zap_disable, bin_dir=bin_dir, no_new_window=no_new_window,
    ))
    if no_new_window:
        click.echo(f"开发版已退出 (rc={proc.returncode})")
    else:
        click.echo(f"开发版已启动 (pid={proc.pid})")
