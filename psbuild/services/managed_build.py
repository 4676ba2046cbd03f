"""托管发布阶段 — dotnet restore / publish

构建配置由平台决定: Linux / macOS 使用 Linux，Windows 使用 Debug。
publish 会重新发布整个输出目录，因此必须在原生构建（含产物复制）之后执行。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from psbuild.core.config import Config
    from psbuild.core.toolchain import Resolver
    from psbuild.utils.shell import CommandExecutor

from psbuild.core.exceptions import PublishError
from psbuild.core.models import BuildConfiguration, PlatformDescriptor
from psbuild.core.toolchain import managed_requirements, require_tools
from psbuild.utils.shell import run_cmd

logger = logging.getLogger(__name__)


class ManagedBuildStage:
    """托管宿主程序发布"""

    def __init__(
        self, config: Config,
        executor: CommandExecutor | None = None,
        which: Resolver | None = None,
    ) -> None:
        self.config = config
        self._executor = executor
        self._which = which

    def check_toolchain(self) -> None:
        require_tools(managed_requirements(), which=self._which)

    def restore(self) -> None:
        """还原托管依赖包"""
        self.check_toolchain()
        root = self.config.root_path
        run_cmd(
            ["dotnet", "restore", str(root)],
            cwd=str(root), label="dotnet restore",
            timeout=self.config.command_timeout,
            executor=self._executor, error_cls=PublishError,
        )

    def publish_args(
        self, platform: PlatformDescriptor, output_dir: Path,
    ) -> list[str]:
        configuration = BuildConfiguration.for_platform(platform)
        return [
            "dotnet", "publish",
            "--framework", self.config.framework,
            "--configuration", configuration.value,
            "--output", str(output_dir),
            str(self.config.resolve(self.config.host_project)),
        ]

    def publish(
        self, platform: PlatformDescriptor, output_dir: Path | None = None,
    ) -> BuildConfiguration:
        """发布托管宿主程序到输出目录，返回使用的构建配置"""
        self.check_toolchain()
        output_dir = output_dir or self.config.output_path
        output_dir.mkdir(parents=True, exist_ok=True)
        configuration = BuildConfiguration.for_platform(platform)
        logger.info("托管发布: configuration=%s output=%s",
                    configuration.value, output_dir)
        run_cmd(
            self.publish_args(platform, output_dir),
            cwd=str(self.config.root_path), label="dotnet publish",
            timeout=self.config.command_timeout,
            executor=self._executor, error_cls=PublishError,
        )
        return configuration
