"""服务容器 — 统一依赖注入，消除各阶段的裸构造

同一容器内的阶段共享同一份 Config、PlatformDescriptor 与命令执行器。
CLI 通过 get_container() 获取阶段，而非直接 import 构造。

依赖关系图（→ 表示依赖）:
  pipeline → native, managed
  dev      → platform
  其余阶段均为独立实例

用法:
    container = ServiceContainer()
    container.pipeline.build(container.platform, restore=True)

    # 测试时显式注入平台和执行器
    container = ServiceContainer(
        config=cfg, platform=PlatformDescriptor(OSFamily.LINUX),
        executor=fake, which=lambda name: f"/usr/bin/{name}",
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from psbuild.core.config import Config
    from psbuild.core.models import PlatformDescriptor
    from psbuild.core.toolchain import Resolver
    from psbuild.services.dev_launch import DevLauncher
    from psbuild.services.managed_build import ManagedBuildStage
    from psbuild.services.native_build import NativeBuildStage
    from psbuild.services.package_service import PackageService
    from psbuild.services.pipeline import BuildPipeline
    from psbuild.utils.shell import CommandExecutor

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器 — 每个实例持有一组共享的阶段"""

    def __init__(
        self,
        config: Config | None = None,
        platform: PlatformDescriptor | None = None,
        executor: CommandExecutor | None = None,
        which: Resolver | None = None,
    ) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from psbuild.core.config import get_config
            config = get_config()
        self._config = config
        self._platform = platform
        self._executor = executor
        self._which = which

    @property
    def config(self) -> Config:
        return self._config

    @property
    def platform(self) -> PlatformDescriptor:
        if self._platform is None:
            from psbuild.core.platform import current_platform
            self._platform = current_platform()
        return self._platform

    @property
    def which(self) -> Resolver | None:
        return self._which

    # ---- 构建阶段 ----

    @property
    def native(self) -> NativeBuildStage:
        if "native" not in self._instances:
            from psbuild.services.native_build import NativeBuildStage
            self._instances["native"] = NativeBuildStage(
                self._config, executor=self._executor, which=self._which,
            )
        return self._instances["native"]  # type: ignore[return-value]

    @property
    def managed(self) -> ManagedBuildStage:
        if "managed" not in self._instances:
            from psbuild.services.managed_build import ManagedBuildStage
            self._instances["managed"] = ManagedBuildStage(
                self._config, executor=self._executor, which=self._which,
            )
        return self._instances["managed"]  # type: ignore[return-value]

    @property
    def pipeline(self) -> BuildPipeline:
        if "pipeline" not in self._instances:
            from psbuild.services.pipeline import BuildPipeline
            self._instances["pipeline"] = BuildPipeline(
                self._config, native=self.native, managed=self.managed,
            )
        return self._instances["pipeline"]  # type: ignore[return-value]

    @property
    def package(self) -> PackageService:
        if "package" not in self._instances:
            from psbuild.services.package_service import PackageService
            self._instances["package"] = PackageService(
                self._config, executor=self._executor, which=self._which,
            )
        return self._instances["package"]  # type: ignore[return-value]

    @property
    def dev(self) -> DevLauncher:
        if "dev" not in self._instances:
            from psbuild.services.dev_launch import DevLauncher
            self._instances["dev"] = DevLauncher(
                self._config, self.platform, executor=self._executor,
            )
        return self._instances["dev"]  # type: ignore[return-value]


# ---- 全局单例 ----

_global: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """获取全局 ServiceContainer 单例"""
    global _global  # noqa: PLW0603
    if _global is None:
        _global = ServiceContainer()
    return _global


def reset_container(container: ServiceContainer | None = None) -> None:
    """重置全局容器（配置重新加载或测试注入时使用）"""
    global _global  # noqa: PLW0603
    _global = container
