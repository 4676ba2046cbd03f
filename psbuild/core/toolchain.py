"""工具链校验

按顺序检查必需的可执行文件，遇到第一个缺失项立即失败（不汇总全部缺失项），
错误信息只包含该工具名和安装提示，保证提示可直接执行。
"""

from __future__ import annotations

import logging
import shutil
from typing import Callable, Optional, Sequence

from psbuild.core.exceptions import MissingDependencyError
from psbuild.core.models import PlatformDescriptor, ToolRequirement

logger = logging.getLogger(__name__)

# 可执行文件解析函数，返回完整路径或 None
Resolver = Callable[[str], Optional[str]]

DOTNET_HINT = "从 https://github.com/dotnet/cli 安装 dotnet"
FPM_HINT = "gem install fpm (参见 https://github.com/jordansissel/fpm)"


def require_tools(
    tools: Sequence[ToolRequirement], *, which: Resolver | None = None,
) -> None:
    """逐个校验工具可解析，第一个缺失项抛 MissingDependencyError"""
    which = which or shutil.which
    for tool in tools:
        path = which(tool.name)
        if not path:
            logger.error("缺少构建依赖: %s", tool.name)
            raise MissingDependencyError(tool.name, tool.hint)
        logger.debug("工具已找到: %s -> %s", tool.name, path)


# =========================================================================
# 各阶段的静态工具链需求
# =========================================================================

def native_requirements(platform: PlatformDescriptor) -> list[ToolRequirement]:
    """原生构建需要的工具（仅 Unix）"""
    if not platform.is_unix:
        return []
    return [
        ToolRequirement(name, f"{platform.install_command} {name}")
        for name in ("cmake", "g++")
    ]


def managed_requirements() -> list[ToolRequirement]:
    """托管发布需要的工具（全平台）"""
    return [ToolRequirement("dotnet", DOTNET_HINT)]


def package_requirements(platform: PlatformDescriptor) -> list[ToolRequirement]:
    """打包需要的工具（仅 Unix）"""
    if not platform.is_unix:
        return []
    return [ToolRequirement("fpm", FPM_HINT)]


def all_requirements(platform: PlatformDescriptor) -> list[ToolRequirement]:
    """平台完整工具链需求，按流水线阶段顺序排列"""
    return (
        native_requirements(platform)
        + managed_requirements()
        + package_requirements(platform)
    )
