"""CLI — 构建命令（原生构建 / 托管发布 / 完整构建）"""

from __future__ import annotations

from pathlib import Path

import click

from psbuild.cli import _svc


def register(group: click.Group) -> None:
    group.add_command(native)
    group.add_command(publish)
    group.add_command(build)


def _output_path(output: str) -> Path:
    if output:
        return _svc().config.resolve(output)
    return _svc().config.output_path


@click.command()
@click.option("--output", "-o", default="", help="构建输出目录（默认取配置 output_dir）")
def native(output: str) -> None:
    """仅构建原生库并复制到输出目录"""
    artifact = _svc().native.build(_svc().platform, _output_path(output))
    if artifact is None:
        click.echo(f"原生构建已跳过: {_svc().platform.family.value}")
    else:
        click.echo(f"原生库: {artifact}")


@click.command()
@click.option("--output", "-o", default="", help="构建输出目录（默认取配置 output_dir）")
@click.option("--restore", is_flag=True, help="发布前执行 dotnet restore")
def publish(output: str, restore: bool) -> None:
    """仅发布托管宿主程序"""
    svc = _svc()
    if restore:
        svc.managed.restore()
    configuration = svc.managed.publish(svc.platform, _output_path(output))
    click.echo(f"发布完成: configuration={configuration.value}")


@click.command()
@click.option("--output", "-o", default="", help="构建输出目录（默认取配置 output_dir）")
@click.option("--restore", is_flag=True, help="发布前执行 dotnet restore")
def build(output: str, restore: bool) -> None:
    """完整构建: 原生库 → 托管发布"""
    svc = _svc()
    report = svc.pipeline.build(svc.platform, restore=restore, output_dir=_output_path(output))
    for step in report.steps:
        click.echo(f"  {step['step']:8s} {step['status']}")
    click.echo(f"构建完成: {report.output_dir}")
