"""psbuild 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
所有 PSBuildError 统一转换为 ClickException（退出码 1，消息输出到 stderr）。
"""

import os
from typing import Any

import click

from psbuild import __version__
from psbuild.core.config import DEFAULT_CONFIG_FILE, init_config
from psbuild.core.exceptions import PSBuildError
from psbuild.services.container import get_container, reset_container
from psbuild.utils.logger import setup_logging


def _svc() -> Any:
    """获取全局服务容器的快捷方式"""
    return get_container()


class PSBuildGroup(click.Group):
    """将业务异常映射为友好的命令行错误"""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except PSBuildError as e:
            raise click.ClickException(f"[{e.code}] {e}") from e


@click.group(cls=PSBuildGroup)
@click.version_option(version=__version__)
@click.option(
    "--config", "-c", "config_path",
    default=lambda: os.getenv("PSBUILD_CONFIG", DEFAULT_CONFIG_FILE),
    show_default=DEFAULT_CONFIG_FILE, help="配置文件路径",
)
def main(config_path: str) -> None:
    """psbuild - 宿主程序与原生库的跨平台构建 / 打包工具"""
    setup_logging(
        level=os.getenv("PSBUILD_LOG_LEVEL", "INFO"),
        json_output=os.getenv("PSBUILD_LOG_JSON", "") == "1",
    )
    init_config(config_path)
    reset_container()


# 注册各领域子命令
from psbuild.cli.cmd_build import register as _reg_build  # noqa: E402
from psbuild.cli.cmd_package import register as _reg_package  # noqa: E402
from psbuild.cli.cmd_dev import register as _reg_dev  # noqa: E402
from psbuild.cli.cmd_misc import register as _reg_misc  # noqa: E402

_reg_build(main)
_reg_package(main)
_reg_dev(main)
_reg_misc(main)
