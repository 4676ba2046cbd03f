"""CLI — 打包命令"""

from __future__ import annotations

import click

from psbuild.cli import _svc


def register(group: click.Group) -> None:
    group.add_command(package)


@click.command()
@click.option("--version", "version", default="", help="包版本（默认取 git describe 并去掉前导 v）")
@click.option("--iteration", default=1, type=int, show_default=True, help="同一版本的打包迭代号")
@click.option("--output", "-o", default="", help="已发布的输出目录（默认取配置 output_dir）")
def package(version: str, iteration: int, output: str) -> None:
    """将构建输出打包为 deb / osxpkg"""
    svc = _svc()
    output_dir = svc.config.resolve(output) if output else None
    path = svc.package.package(
        svc.platform, version=version or None, iteration=iteration,
        output_dir=output_dir,
    )
    click.echo(f"打包完成: {path}" if path else "打包完成")
